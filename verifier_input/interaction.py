"""Interaction elements z and alpha of the memory permutation argument.

The verifier derives them from its keccak PRNG right after reading the trace
commitment. They are recovered here two ways: from the proof's own
annotations, and by replaying the PRNG from the public input hash. The
annotations are authoritative; a replay that disagrees means a codec bug and
fails the run.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from cairo_primitives.channel import PrngChannel
from cairo_primitives.field import CAIRO_PRIME
from verifier_input.annotations import extract_interaction_elements, extract_trace_commitment
from verifier_input.errors import ArithmeticInconsistency, ChallengeMismatch, MalformedProof

logger = logging.getLogger(__name__)

N_MEMORY_INTERACTION_ELEMENTS = 2


@dataclass(frozen=True)
class InteractionElements:
    """Canonical memory permutation challenges, both in [0, p)."""
    z: int
    alpha: int

    def __post_init__(self):
        for name in ("z", "alpha"):
            value = getattr(self, name)
            if not 0 <= value < CAIRO_PRIME:
                raise ArithmeticInconsistency(f"{name} is not a canonical field element: 0x{value:x}")


def replay_interaction_elements(
    public_input_words: Sequence[int],
    proof_words: Sequence[int],
    max_retries: int = 128,
) -> InteractionElements:
    """Re-derive z and alpha exactly as the verifier channel does.

    Args:
        public_input_words: Public input without page products
        proof_words: Proof as uint256 words; the first is the trace commitment
        max_retries: Rejection-sampling budget per element

    Raises:
        ArithmeticInconsistency: If the PRNG fails to produce an element in budget
    """
    channel = PrngChannel.from_public_input(public_input_words)

    if proof_words:
        channel.mix(proof_words[0])
    else:
        logger.debug("Proof has no words; deriving challenges without a trace commitment")

    try:
        z, alpha = channel.draw_field_elements(N_MEMORY_INTERACTION_ELEMENTS, max_retries)
    except ArithmeticError as e:
        raise ArithmeticInconsistency(str(e)) from e
    return InteractionElements(z=z, alpha=alpha)


def annotated_interaction_elements(annotations: Sequence[str]) -> Optional[InteractionElements]:
    """z and alpha as logged in the annotations, or None if they are not there.

    Raises:
        MalformedProof: If a logged element is not below the Cairo prime
    """
    elements = extract_interaction_elements(annotations)
    if len(elements) < N_MEMORY_INTERACTION_ELEMENTS:
        return None
    for index, value in enumerate(elements[:N_MEMORY_INTERACTION_ELEMENTS]):
        if value >= CAIRO_PRIME:
            raise MalformedProof(
                "annotations", f"interaction element #{index} 0x{value:x} is not below the Cairo prime"
            )
    return InteractionElements(z=elements[0], alpha=elements[1])


def check_trace_commitment(annotations: Sequence[str], proof_words: Sequence[int]) -> None:
    """Warn when the annotated trace commitment is not the first proof word."""
    annotated = extract_trace_commitment(annotations)
    if annotated is None or not proof_words:
        return
    if annotated != proof_words[0]:
        logger.warning(
            "Annotated trace commitment 0x%x differs from first proof word 0x%x",
            annotated, proof_words[0],
        )


def derive_interaction_elements(
    annotations: Sequence[str],
    public_input_words: Sequence[int],
    proof_words: Sequence[int],
    verify: bool = True,
    max_retries: int = 128,
) -> InteractionElements:
    """Resolve z and alpha, cross-checking annotations against a replay.

    Args:
        annotations: Proof annotations
        public_input_words: Public input without page products
        proof_words: Proof as uint256 words
        verify: Replay the PRNG even when the annotations carry the elements
        max_retries: Rejection-sampling budget per element

    Returns:
        The annotated elements when present, otherwise the replayed ones

    Raises:
        ChallengeMismatch: If both sources exist and disagree
    """
    annotated = annotated_interaction_elements(annotations)

    if annotated is not None and not verify:
        logger.info("Using interaction elements from annotations (replay skipped)")
        return annotated

    check_trace_commitment(annotations, proof_words)
    replayed = replay_interaction_elements(public_input_words, proof_words, max_retries)

    if annotated is None:
        logger.info("No interaction elements in annotations; using replayed values")
        return replayed

    for index, name in enumerate(("z", "alpha")):
        a, r = getattr(annotated, name), getattr(replayed, name)
        if a != r:
            raise ChallengeMismatch(name, annotated=a, replayed=r, index=index)

    logger.info("Interaction elements from annotations match the PRNG replay")
    return annotated
