"""Tests - verifier-input test suite and shared builders."""
