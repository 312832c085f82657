"""Error taxonomy for the verifier-input codec.

Every failure is fatal except a fact-topology disagreement, which is only
logged. There is no partial output.
"""

from typing import Optional


class VerifierInputError(Exception):
    """Base class for all codec failures."""


class MalformedInput(VerifierInputError, ValueError):
    """A required field is missing, has the wrong type, or does not parse."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class MalformedProof(MalformedInput):
    """The annotated proof document is malformed."""


class ArithmeticInconsistency(VerifierInputError, ArithmeticError):
    """A derived value violates a field or memory-layout invariant."""


class ChallengeMismatch(ArithmeticInconsistency):
    """Replayed interaction elements disagree with the proof annotations."""

    def __init__(self, name: str, annotated: int, replayed: int, index: Optional[int] = None):
        self.name = name
        self.annotated = annotated
        self.replayed = replayed
        label = name if index is None else f"{name} (#{index})"
        super().__init__(
            f"{label} from annotations 0x{annotated:x} != replayed 0x{replayed:x}"
        )


class TopologyMismatch(UserWarning):
    """Task count in the program output differs from the fact-topology count.

    Never raised; names the condition in the warning log record.
    """
