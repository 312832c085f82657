"""FRI step list for a given trace length.

The first FRI layer is always a zero step (the verifier reads the original
commitment there); the remaining degree is folded four bits at a time with a
shorter last step for the remainder.
"""

import math
from typing import Any

from verifier_input.errors import MalformedInput

FRI_FOLD_STEP = 4
# Extra log-degree contributed by the Cairo constraint blowup.
FRI_DEGREE_OFFSET = 4


def fri_degree(n_steps: int, degree_bound: int) -> int:
    """round(log2(n_steps / degree_bound)) + 4."""
    if n_steps <= 0 or degree_bound <= 0:
        raise ValueError(f"n_steps and degree_bound must be positive, got {n_steps}, {degree_bound}")
    return round(math.log2(n_steps / degree_bound)) + FRI_DEGREE_OFFSET


def calculate_fri_step_list(n_steps: int, degree_bound: int) -> list[int]:
    """FRI step list whose steps sum to fri_degree(n_steps, degree_bound)."""
    degree = fri_degree(n_steps, degree_bound)
    steps = [0]
    steps.extend([FRI_FOLD_STEP] * (degree // FRI_FOLD_STEP))
    remainder = degree % FRI_FOLD_STEP
    if remainder:
        steps.append(remainder)
    return steps


def read_n_steps(public_input: Any) -> int:
    """Find the trace length in an AIR public input document.

    Looks at n_steps, then trace_length, then public_memory.trace_length.
    """
    if not isinstance(public_input, dict):
        raise MalformedInput("public_input", "expected a JSON object")

    candidates = [
        ("n_steps", public_input.get("n_steps")),
        ("trace_length", public_input.get("trace_length")),
    ]
    memory = public_input.get("public_memory")
    if isinstance(memory, dict):
        candidates.append(("public_memory.trace_length", memory.get("trace_length")))

    for name, value in candidates:
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise MalformedInput(name, f"expected a positive integer, got {value!r}")
        return value

    raise MalformedInput("n_steps", "could not find n_steps or trace_length in public input")
