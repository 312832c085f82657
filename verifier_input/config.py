"""Codec configuration."""

import json
from dataclasses import dataclass, fields
from typing import Optional

from verifier_input.errors import MalformedInput


@dataclass(frozen=True)
class CodecConfig:
    """Knobs for a single verifier-input run.

    Attributes:
        verify_challenges: Replay the PRNG and require it to match the annotations
        max_challenge_retries: Rejection-sampling budget per interaction element
        bootloader_prefix_threshold: First output word above this means a
            bootloader-config prefix precedes the task count
        n_verifier_friendly_commitment_layers: Overrides the proof document's value
    """
    verify_challenges: bool = True
    max_challenge_retries: int = 128
    bootloader_prefix_threshold: int = 2**32
    n_verifier_friendly_commitment_layers: Optional[int] = None

    @classmethod
    def from_json(cls, path: str) -> "CodecConfig":
        """Load overrides from a JSON object; unknown keys are rejected."""
        with open(path) as f:
            j = json.load(f)

        if not isinstance(j, dict):
            raise MalformedInput(path, "config must be a JSON object")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(j) - known)
        if unknown:
            raise MalformedInput(path, f"unknown config keys {unknown}")

        return cls(**j)
