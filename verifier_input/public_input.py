"""Cairo public input vector in the verifier's layout.

The vector is assembled in two passes. The first pass builds everything
except the page products; its keccak256 seeds the PRNG that yields z and
alpha. The second pass appends one permutation product per page, which
needs z and alpha.

Layout:
    [n_verifier_friendly_commitment_layers, log2(n_steps), rc_min, rc_max, layout,
     (begin_addr, stop_ptr) for each present segment in SEGMENT_ORDER,
     padding_address, padding_value, n_pages,
     page 0: size, hash
     page k > 0: start_address, size, hash
     ...,
     product per page]
"""

import logging
from typing import Optional

import numpy as np

from cairo_primitives.field import CAIRO_PRIME, FF, to_field
from verifier_input.errors import ArithmeticInconsistency
from verifier_input.memory_pages import Cell, MemoryPageFacts
from verifier_input.proof import AnnotatedProof, PublicInput

logger = logging.getLogger(__name__)

SEGMENT_ORDER = (
    "program",
    "execution",
    "output",
    "pedersen",
    "range_check",
    "ecdsa",
    "bitwise",
    "ec_op",
    "keccak",
    "poseidon",
)


# --- Scalar Encodings ---

def log2_steps(n_steps: int) -> int:
    """floor(log2(n_steps)); Cairo traces are a power of two long."""
    if n_steps & (n_steps - 1):
        logger.warning("n_steps=%d is not a power of two; using floor(log2)", n_steps)
    return n_steps.bit_length() - 1


def layout_to_int(layout: str) -> int:
    """Big-endian integer of the layout name's ASCII bytes."""
    return int.from_bytes(layout.encode("ascii"), "big")


def serialize_segments(public_input: PublicInput) -> list[int]:
    """(begin_addr, stop_ptr) of every present segment, in SEGMENT_ORDER."""
    result = []
    for name in SEGMENT_ORDER:
        seg = public_input.memory_segments.get(name)
        if seg is not None:
            result.extend((seg.begin_addr, seg.stop_ptr))

    ignored = sorted(set(public_input.memory_segments) - set(SEGMENT_ORDER))
    if ignored:
        logger.debug("Segments not part of the public input layout: %s", ignored)
    return result


# --- First Pass ---

def public_input_without_products(
    proof: AnnotatedProof,
    facts: MemoryPageFacts,
    n_verifier_friendly_commitment_layers: Optional[int] = None,
) -> list[int]:
    """Assemble the public input up to, but excluding, the page products.

    Args:
        proof: Parsed annotated proof
        facts: Memory pages built from the same proof's public memory
        n_verifier_friendly_commitment_layers: Overrides the proof parameters when given

    Returns:
        Public input words; their keccak256 seeds the verifier PRNG
    """
    public_input = proof.public_input

    n_vfcl = n_verifier_friendly_commitment_layers
    if n_vfcl is None:
        n_vfcl = proof.proof_parameters.n_verifier_friendly_commitment_layers or 0

    result = [
        n_vfcl,
        log2_steps(public_input.n_steps),
        public_input.rc_min,
        public_input.rc_max,
        layout_to_int(public_input.layout),
    ]
    result.extend(serialize_segments(public_input))

    # The first public memory cell doubles as the padding cell.
    padding = public_input.public_memory[0]
    result.extend((padding.address, padding.value))

    result.append(facts.n_pages)
    for page in facts.sorted_pages():
        if page.start_address is not None:
            result.append(page.start_address)
        result.extend((page.size, page.hash))

    return result


# --- Second Pass ---

def permutation_product(cells: list[Cell], z: int, alpha: int) -> int:
    """Product over the page of (z - (address + alpha * value)) mod p.

    Folded from 1 over the cells in encounter order.
    """
    if not cells:
        return 1
    addresses = FF([addr % CAIRO_PRIME for addr, _ in cells])
    values = FF([value % CAIRO_PRIME for _, value in cells])
    terms = to_field(z) - (addresses + to_field(alpha) * values)
    return int(np.multiply.reduce(terms))


def append_page_products(prefix: list[int], facts: MemoryPageFacts, z: int, alpha: int) -> list[int]:
    """Return prefix followed by one permutation product per page, ascending by page id."""
    for name, value in (("z", z), ("alpha", alpha)):
        if not 0 <= value < CAIRO_PRIME:
            raise ArithmeticInconsistency(f"{name} is not a canonical field element: 0x{value:x}")

    products = [permutation_product(list(page.cells), z, alpha) for page in facts.sorted_pages()]
    return list(prefix) + products
