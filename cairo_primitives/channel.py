"""Keccak PRNG of the on-chain verifier channel.

The channel is the Fiat-Shamir state of the Solidity verifier: a 32-byte
digest and a counter that lives in the word right after it. Field elements
are drawn by rejection sampling below 31 * p and then taken out of
Montgomery form.
"""

from typing import Iterable, List

from cairo_primitives.field import PRNG_BOUND, from_montgomery
from cairo_primitives.keccak import WORD_LIMIT, WORD_SIZE, digest_to_int, hash_words, keccak256, to_word


class PrngChannel:
    """
    Verifier-side Fiat-Shamir channel.

    Attributes:
        digest: Current 32-byte PRNG digest
        counter: Counter word hashed next to the digest when advancing
    """

    def __init__(self, digest: bytes, counter: int = 0):
        if len(digest) != WORD_SIZE:
            raise ValueError(f"digest must be {WORD_SIZE} bytes, got {len(digest)}")
        self.digest = bytes(digest)
        self.counter = counter

    @classmethod
    def from_public_input(cls, words: Iterable[int]) -> "PrngChannel":
        """Seed the channel with keccak256 of the public input words."""
        return cls(to_word(hash_words(words)))

    def mix(self, word: int) -> None:
        """
        Absorb a prover message (readHash with mix=true).

        digest := keccak(digest + 1 || word), counter := 0. The increment is
        a uint256 addition and wraps at 2^256.
        """
        bumped = (digest_to_int(self.digest) + 1) % WORD_LIMIT
        self.digest = keccak256(to_word(bumped) + to_word(word))
        self.counter = 0

    def _advance(self) -> None:
        """digest := keccak(digest || counter), then counter += 1."""
        self.digest = keccak256(self.digest + to_word(self.counter))
        self.counter += 1

    def draw_field_element(self, max_retries: int = 128) -> int:
        """
        Draw one canonical field element.

        Args:
            max_retries: Rejection-sampling attempts before giving up

        Returns:
            Field element in [0, p), converted out of Montgomery form

        Raises:
            ArithmeticError: If no digest below the bound was found
        """
        retries = 0
        candidate = digest_to_int(self.digest)
        while candidate >= PRNG_BOUND:
            if retries >= max_retries:
                raise ArithmeticError(
                    f"PRNG digest stayed above 31 * p after {max_retries} retries"
                )
            self._advance()
            retries += 1
            candidate = digest_to_int(self.digest)

        element = from_montgomery(candidate)
        self._advance()
        return element

    def draw_field_elements(self, n: int, max_retries: int = 128) -> List[int]:
        """Draw n field elements in order."""
        return [self.draw_field_element(max_retries) for _ in range(n)]

    def get_state(self) -> tuple[bytes, int]:
        """Return (digest, counter)."""
        return self.digest, self.counter
