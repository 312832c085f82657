"""
Pytest configuration and shared fixtures for the verifier-input tests.
"""

import pytest

from tests.fixtures import annotated_document, make_document
from verifier_input.proof import parse_annotated_proof


@pytest.fixture
def document() -> dict:
    """Valid annotated proof document without interaction annotations."""
    return make_document()


@pytest.fixture
def proof(document):
    """Parsed form of the default document."""
    return parse_annotated_proof(document)


@pytest.fixture
def annotated_proof():
    """Parsed document whose annotations carry correct z and alpha."""
    return parse_annotated_proof(annotated_document())
