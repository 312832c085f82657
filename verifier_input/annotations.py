"""Verifier transcript annotations.

The stone verifier logs every channel message as a line such as

    V->P: /cpu air/STARK/Interaction: Interaction element #0: Field Element(0x1f...)
    P->V[0:32]: /cpu air/STARK/Original/Commit on Trace: Hash(0x5a...)

Only the lines the codec cross-checks are recognised here.
"""

import re
from typing import Iterable, Optional

INTERACTION_ELEMENT_RE = re.compile(
    r"V->P: /cpu air/STARK/Interaction: Interaction element #(\d+): Field Element\(0x([0-9a-fA-F]+)\)"
)
TRACE_COMMITMENT_RE = re.compile(
    r"P->V\[\d+:\d+\]: /cpu air/STARK/Original/Commit on Trace: Hash\(0x([0-9a-fA-F]+)\)"
)


def extract_interaction_elements(annotations: Iterable[str]) -> list[int]:
    """Return every interaction element in annotation order."""
    elements = []
    for line in annotations:
        for match in INTERACTION_ELEMENT_RE.finditer(line):
            elements.append(int(match.group(2), 16))
    return elements


def extract_trace_commitment(annotations: Iterable[str]) -> Optional[int]:
    """Return the first trace commitment hash, or None if not annotated."""
    for line in annotations:
        match = TRACE_COMMITMENT_RE.search(line)
        if match:
            return int(match.group(1), 16)
    return None

