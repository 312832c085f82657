"""Annotated proof data structures and parsing.

The annotated proof is the JSON document produced by the stone prover with
annotations enabled. Numbers arrive in several shapes (JSON numbers, decimal
strings, hex strings); they are decoded here, once, into Python ints so that
no later stage re-parses strings.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from cairo_primitives.field import CAIRO_PRIME
from cairo_primitives.keccak import WORD_SIZE
from verifier_input.errors import MalformedProof

logger = logging.getLogger(__name__)

# Segments a non-trivial Cairo run always exposes.
REQUIRED_SEGMENTS = ("program", "execution")

HEX_DIGITS_RE = re.compile(r"[0-9a-fA-F]*")


# --- Proof Data Structures ---

@dataclass(frozen=True)
class MemoryCell:
    """One public memory cell."""
    page: int
    address: int
    value: int


@dataclass(frozen=True)
class MemorySegment:
    """Address range [begin_addr, stop_ptr) of a memory segment."""
    begin_addr: int
    stop_ptr: int


@dataclass(frozen=True)
class PublicInput:
    """Cairo AIR public input.

    Attributes:
        n_steps: Trace length in Cairo steps (a power of two)
        rc_min: Lower range-check bound
        rc_max: Upper range-check bound
        layout: Layout name, e.g. "starknet"
        memory_segments: Segment name to address range
        public_memory: Public memory cells in prover order; never empty
    """
    n_steps: int
    rc_min: int
    rc_max: int
    layout: str
    memory_segments: dict[str, MemorySegment]
    public_memory: tuple[MemoryCell, ...]


@dataclass(frozen=True)
class FriParameters:
    """FRI protocol parameters."""
    n_queries: int
    proof_of_work_bits: int
    last_layer_degree_bound: int
    fri_step_list: tuple[int, ...]


@dataclass(frozen=True)
class ProofParameters:
    """STARK parameters the proof was generated with."""
    log_n_cosets: int
    fri: FriParameters
    n_verifier_friendly_commitment_layers: Optional[int] = None


@dataclass(frozen=True)
class AnnotatedProof:
    """Parsed annotated proof.

    Attributes:
        annotations: Verifier transcript log lines, in order
        proof_bytes: Raw proof, right-padded with zeros to a multiple of 32 bytes
        public_input: Cairo public input
        proof_parameters: STARK/FRI parameters
    """
    annotations: tuple[str, ...]
    proof_bytes: bytes
    public_input: PublicInput
    proof_parameters: ProofParameters

    @property
    def proof_words(self) -> list[int]:
        """Proof as big-endian uint256 words."""
        return [
            int.from_bytes(self.proof_bytes[i:i + WORD_SIZE], "big")
            for i in range(0, len(self.proof_bytes), WORD_SIZE)
        ]


# --- Field Decoding ---

def _require(j: Any, key: str, path: str) -> Any:
    """Return j[key] or fail naming the dotted path."""
    if not isinstance(j, dict):
        raise MalformedProof(path or "<document>", "expected a JSON object")
    if key not in j:
        raise MalformedProof(f"{path}.{key}" if path else key, "missing required field")
    return j[key]


def _as_uint(value: Any, path: str) -> int:
    """Decode a non-negative JSON integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedProof(path, f"expected an integer, got {type(value).__name__}")
    if value < 0:
        raise MalformedProof(path, f"expected a non-negative integer, got {value}")
    return value


def _as_address(value: Any, path: str) -> int:
    """Decode an address given as a JSON number or a numeric string.

    Addresses are field elements in the public input, so they must be below p.
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                decoded = _as_uint(int(text, 16), path)
            else:
                decoded = _as_uint(int(text, 10), path)
        except ValueError:
            raise MalformedProof(path, f"non-numeric address {value!r}") from None
    else:
        decoded = _as_uint(value, path)

    if decoded >= CAIRO_PRIME:
        raise MalformedProof(path, "address is not below the Cairo prime")
    return decoded


def _as_field_element(value: Any, path: str) -> int:
    """Decode a field element given as a hex string (0x optional) or a JSON number."""
    if isinstance(value, str):
        text = value[2:] if value.lower().startswith("0x") else value
        if not text or not HEX_DIGITS_RE.fullmatch(text):
            raise MalformedProof(path, f"non-hex field element {value!r}")
        decoded = int(text, 16)
    else:
        decoded = _as_uint(value, path)

    if decoded >= CAIRO_PRIME:
        raise MalformedProof(path, "field element is not reduced modulo the Cairo prime")
    return decoded


def decode_proof_hex(proof_hex: Any, path: str = "proof_hex") -> bytes:
    """Decode proof_hex and right-pad it with zero bytes to whole 32-byte words.

    Odd-length or non-hex input is rejected before any padding happens.
    """
    if not isinstance(proof_hex, str):
        raise MalformedProof(path, "expected a hex string")
    text = proof_hex[2:] if proof_hex.lower().startswith("0x") else proof_hex
    if len(text) % 2 != 0:
        raise MalformedProof(path, f"odd number of hex digits ({len(text)})")
    if not HEX_DIGITS_RE.fullmatch(text):
        raise MalformedProof(path, "not a hex string")
    raw = bytes.fromhex(text)

    remainder = len(raw) % WORD_SIZE
    if remainder:
        raw += b"\x00" * (WORD_SIZE - remainder)
    return raw


# --- Document Parsing ---

def _parse_memory_cell(j: Any, path: str) -> MemoryCell:
    return MemoryCell(
        page=_as_uint(_require(j, "page", path), f"{path}.page"),
        address=_as_address(_require(j, "address", path), f"{path}.address"),
        value=_as_field_element(_require(j, "value", path), f"{path}.value"),
    )


def _parse_segments(j: Any, path: str) -> dict[str, MemorySegment]:
    if not isinstance(j, dict):
        raise MalformedProof(path, "expected a JSON object")

    segments = {}
    for name, seg in j.items():
        seg_path = f"{path}.{name}"
        begin = _as_uint(_require(seg, "begin_addr", seg_path), f"{seg_path}.begin_addr")
        stop = _as_uint(_require(seg, "stop_ptr", seg_path), f"{seg_path}.stop_ptr")
        segments[name] = MemorySegment(begin_addr=begin, stop_ptr=stop)

    missing = [name for name in REQUIRED_SEGMENTS if name not in segments]
    if missing:
        logger.warning("Memory segments %s are missing; treating proof as trivial", missing)
    return segments


def _parse_public_input(j: Any, path: str = "public_input") -> PublicInput:
    n_steps = _as_uint(_require(j, "n_steps", path), f"{path}.n_steps")
    if n_steps == 0:
        raise MalformedProof(f"{path}.n_steps", "must be positive")

    layout = _require(j, "layout", path)
    if not isinstance(layout, str) or not layout.isascii():
        raise MalformedProof(f"{path}.layout", "expected an ASCII string")
    if len(layout) > WORD_SIZE:
        raise MalformedProof(f"{path}.layout", f"longer than {WORD_SIZE} bytes")

    memory = _require(j, "public_memory", path)
    if not isinstance(memory, list):
        raise MalformedProof(f"{path}.public_memory", "expected a list")
    if not memory:
        raise MalformedProof(f"{path}.public_memory", "must not be empty")
    cells = tuple(
        _parse_memory_cell(cell, f"{path}.public_memory[{i}]") for i, cell in enumerate(memory)
    )

    return PublicInput(
        n_steps=n_steps,
        rc_min=_as_uint(_require(j, "rc_min", path), f"{path}.rc_min"),
        rc_max=_as_uint(_require(j, "rc_max", path), f"{path}.rc_max"),
        layout=layout,
        memory_segments=_parse_segments(_require(j, "memory_segments", path), f"{path}.memory_segments"),
        public_memory=cells,
    )


def _parse_proof_parameters(j: Any, path: str = "proof_parameters") -> ProofParameters:
    stark = _require(j, "stark", path)
    stark_path = f"{path}.stark"
    fri = _require(stark, "fri", stark_path)
    fri_path = f"{stark_path}.fri"

    steps = _require(fri, "fri_step_list", fri_path)
    if not isinstance(steps, list):
        raise MalformedProof(f"{fri_path}.fri_step_list", "expected a list")

    last_layer = _as_uint(
        _require(fri, "last_layer_degree_bound", fri_path), f"{fri_path}.last_layer_degree_bound"
    )
    if last_layer == 0:
        raise MalformedProof(f"{fri_path}.last_layer_degree_bound", "must be positive")

    n_vfcl = j.get("n_verifier_friendly_commitment_layers") if isinstance(j, dict) else None
    if n_vfcl is not None:
        n_vfcl = _as_uint(n_vfcl, f"{path}.n_verifier_friendly_commitment_layers")

    return ProofParameters(
        log_n_cosets=_as_uint(_require(stark, "log_n_cosets", stark_path), f"{stark_path}.log_n_cosets"),
        fri=FriParameters(
            n_queries=_as_uint(_require(fri, "n_queries", fri_path), f"{fri_path}.n_queries"),
            proof_of_work_bits=_as_uint(
                _require(fri, "proof_of_work_bits", fri_path), f"{fri_path}.proof_of_work_bits"
            ),
            last_layer_degree_bound=last_layer,
            fri_step_list=tuple(
                _as_uint(s, f"{fri_path}.fri_step_list[{i}]") for i, s in enumerate(steps)
            ),
        ),
        n_verifier_friendly_commitment_layers=n_vfcl,
    )


def parse_annotated_proof(j: Any) -> AnnotatedProof:
    """Build an AnnotatedProof from a decoded JSON document.

    Raises:
        MalformedProof: On the first missing or invalid field
    """
    annotations = _require(j, "annotations", "")
    if not isinstance(annotations, list) or not all(isinstance(a, str) for a in annotations):
        raise MalformedProof("annotations", "expected a list of strings")

    return AnnotatedProof(
        annotations=tuple(annotations),
        proof_bytes=decode_proof_hex(_require(j, "proof_hex", "")),
        public_input=_parse_public_input(_require(j, "public_input", "")),
        proof_parameters=_parse_proof_parameters(_require(j, "proof_parameters", "")),
    )


def load_annotated_proof(path: str) -> AnnotatedProof:
    """Load and parse an annotated proof JSON file."""
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedProof(path, f"invalid JSON: {e}") from e
    return parse_annotated_proof(data)


# --- Proof Parameters Vector ---

def _ceil_log2(n: int) -> int:
    return (n - 1).bit_length()


def proof_params_vector(params: ProofParameters) -> list[int]:
    """Encode proof parameters in the verifier's proofParams layout.

    [n_queries, log_n_cosets, proof_of_work_bits, ceil(log2(last_layer_degree_bound)),
     len(fri_step_list), *fri_step_list]
    """
    fri = params.fri
    return [
        fri.n_queries,
        params.log_n_cosets,
        fri.proof_of_work_bits,
        _ceil_log2(fri.last_layer_degree_bound),
        len(fri.fri_step_list),
        *fri.fri_step_list,
    ]
