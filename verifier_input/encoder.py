"""Verifier input document.

Every integer is written as a 0x-prefixed lowercase hex string without
zero padding, which is what the contract-call layer parses into uint256.
"""

import json
import os
import tempfile
from dataclasses import dataclass, field
from typing import Any, Optional

from cairo_primitives.field import CAIRO_PRIME
from verifier_input.errors import ArithmeticInconsistency
from verifier_input.memory_pages import MemoryPageFacts


@dataclass(frozen=True)
class VerifierInput:
    """Everything the verifier call needs, as integers.

    Attributes:
        proof_params: proofParams vector
        proof: Proof as uint256 words
        public_input: Cairo public input including page products
        z: Memory interaction element z
        alpha: Memory interaction element alpha
        memory_page_facts: Page registration data
        task_metadata: taskMetadata vector
        task_output_layout: Detected bootloader output layout, if any
    """
    proof_params: list[int]
    proof: list[int]
    public_input: list[int]
    z: int
    alpha: int
    memory_page_facts: MemoryPageFacts
    task_metadata: list[int] = field(default_factory=lambda: [0])
    task_output_layout: Optional[str] = None


def to_hex(value: int) -> str:
    """0x-prefixed lowercase hex, e.g. 0 -> "0x0", 255 -> "0xff"."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    if value < 0:
        raise ArithmeticInconsistency(f"cannot encode negative value {value} as uint256")
    return hex(value)


def _hex_list(values: list[int]) -> list[str]:
    return [to_hex(v) for v in values]


def encode_memory_page_facts(facts: MemoryPageFacts) -> dict[str, Any]:
    """regular_page / continuous_pages in registration form."""
    regular = None
    if facts.regular_page is not None:
        regular = {"memory_pairs": _hex_list(facts.regular_page.memory_pairs)}
    return {
        "regular_page": regular,
        "continuous_pages": [
            {"start_addr": to_hex(cp.start_address), "values": _hex_list(cp.values)}
            for cp in facts.continuous_pages
        ],
    }


def encode_verifier_input(vi: VerifierInput) -> dict[str, Any]:
    """Convert a VerifierInput to a JSON-serializable dictionary."""
    for name in ("z", "alpha"):
        value = getattr(vi, name)
        if not 0 <= value < CAIRO_PRIME:
            raise ArithmeticInconsistency(f"{name} is not a canonical field element: 0x{value:x}")

    j: dict[str, Any] = {
        "proof_params": _hex_list(vi.proof_params),
        "proof": _hex_list(vi.proof),
        "public_input": _hex_list(vi.public_input),
        "z": to_hex(vi.z),
        "alpha": to_hex(vi.alpha),
        "memory_page_facts": encode_memory_page_facts(vi.memory_page_facts),
        "task_metadata": _hex_list(vi.task_metadata),
    }
    if vi.task_output_layout is not None:
        j["task_output_layout"] = vi.task_output_layout
    return j


def write_verifier_input(vi: VerifierInput, path: str) -> None:
    """Encode and write the document; the target is replaced only once fully written."""
    j = encode_verifier_input(vi)

    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".verifier_input.", suffix=".json")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(j, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise
