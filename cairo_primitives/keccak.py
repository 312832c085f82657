"""Keccak-256 over EVM words.

Everything the verifier hashes lives in 32-byte memory slots, so every
integer fed to keccak is serialized big-endian and left-padded to a full
word. A value that is not padded to 32 bytes produces a different digest.
"""

from typing import Iterable

from Crypto.Hash import keccak

WORD_SIZE = 32
WORD_LIMIT = 1 << (8 * WORD_SIZE)


def keccak256(data: bytes) -> bytes:
    """Keccak-256 (Ethereum variant, not NIST SHA3-256)."""
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


def to_word(value: int) -> bytes:
    """Serialize a uint256 as a big-endian 32-byte word."""
    value = int(value)
    if value < 0 or value >= WORD_LIMIT:
        raise ValueError(f"value does not fit in a uint256 word: {value}")
    return value.to_bytes(WORD_SIZE, "big")


def pack_words(values: Iterable[int]) -> bytes:
    """Concatenate values as 32-byte words (abi.encodePacked of uint256[])."""
    return b"".join(to_word(v) for v in values)


def digest_to_int(digest: bytes) -> int:
    """Interpret a digest as a big-endian unsigned integer."""
    return int.from_bytes(digest, "big")


def hash_words(values: Iterable[int]) -> int:
    """keccak256 of the packed words, returned as an integer."""
    return digest_to_int(keccak256(pack_words(values)))
