"""Diagnostics at fixed pipeline checkpoints.

The pipeline calls a PipelineTracer after parsing, after the interaction
elements are known, and right before serialization. Stages never log
diagnostics about each other; pass a tracer with a different logger, or a
subclass, to redirect or capture them.
"""

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from verifier_input.encoder import VerifierInput
    from verifier_input.interaction import InteractionElements
    from verifier_input.memory_pages import MemoryPageFacts
    from verifier_input.proof import AnnotatedProof


class PipelineTracer:
    """Logs a summary at each pipeline checkpoint."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("verifier_input.pipeline")

    def post_parse(self, proof: "AnnotatedProof", facts: "MemoryPageFacts") -> None:
        pi = proof.public_input
        self.logger.info(
            "Parsed proof: %d bytes, %d annotations, layout=%s, n_steps=%d, "
            "%d public memory cells in %d pages",
            len(proof.proof_bytes), len(proof.annotations), pi.layout, pi.n_steps,
            len(pi.public_memory), facts.n_pages,
        )

    def post_challenges(self, elements: "InteractionElements", public_input_hash: int) -> None:
        self.logger.info("Public input hash: 0x%064x", public_input_hash)
        self.logger.info("z = 0x%x", elements.z)
        self.logger.info("alpha = 0x%x", elements.alpha)

    def pre_serialize(self, vi: "VerifierInput") -> None:
        self.logger.info(
            "Verifier input: proof_params=%d, proof=%d, public_input=%d, task_metadata=%d words",
            len(vi.proof_params), len(vi.proof), len(vi.public_input), len(vi.task_metadata),
        )
