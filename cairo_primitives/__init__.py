"""Primitives - Cairo field arithmetic, keccak word hashing and the verifier PRNG."""

from cairo_primitives.channel import PrngChannel
from cairo_primitives.field import (
    CAIRO_PRIME,
    FF,
    MONTGOMERY_R,
    MONTGOMERY_R_INV,
    PRNG_BOUND,
    from_montgomery,
    to_field,
)
from cairo_primitives.keccak import (
    WORD_SIZE,
    digest_to_int,
    hash_words,
    keccak256,
    pack_words,
    to_word,
)

__all__ = [
    # Field
    "CAIRO_PRIME",
    "FF",
    "MONTGOMERY_R",
    "MONTGOMERY_R_INV",
    "PRNG_BOUND",
    "from_montgomery",
    "to_field",
    # Hash
    "WORD_SIZE",
    "keccak256",
    "to_word",
    "pack_words",
    "hash_words",
    "digest_to_int",
    # Channel
    "PrngChannel",
]
