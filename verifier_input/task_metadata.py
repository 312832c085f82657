"""Task metadata for proofs of bootloader runs.

When the proven program is a bootloader, its output is a sequence of task
outputs, and the verifier needs, per task, the output size, the program hash
and the fact topology (the Merkle tree shape of the task's output pages).
Fact topologies come from a side-channel file written by the bootloader run;
without that file the proof is a single plain task and the metadata is [0].

Output layout detection is a magnitude heuristic. A bootloader run with a
bootloader config starts its output with the simple bootloader program hash,
a full field element, so a first word above 2^32 is read as that prefix.
Otherwise the first word is the task count. A plain output whose first task
count happens to exceed 2^32 would be misread; the chosen layout is therefore
reported with the metadata instead of being silently assumed.

Emitted words:
    [n_tasks, (output_size, program_hash, n_tree_pairs, *tree_structure) per task]
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from verifier_input.errors import MalformedInput, TopologyMismatch
from verifier_input.proof import PublicInput

logger = logging.getLogger(__name__)

NO_TASKS = (0,)
DEFAULT_PREFIX_THRESHOLD = 2**32


class OutputLayout(Enum):
    """How the task count is framed in the program output."""
    PLAIN = "plain"                          # [n_tasks, task...]
    BOOTLOADER_CONFIG = "bootloader_config"  # [program_hash, config_hash, n_tasks, task...]

    @property
    def count_offset(self) -> int:
        return 2 if self is OutputLayout.BOOTLOADER_CONFIG else 0

    @property
    def tasks_offset(self) -> int:
        return self.count_offset + 1


@dataclass(frozen=True)
class FactTopology:
    """Fact topology of one bootloader task.

    Attributes:
        tree_structure: Flat (n_pages, n_nodes) pairs describing the fact Merkle tree
        page_sizes: Sizes of the task's output pages
    """
    tree_structure: tuple[int, ...]
    page_sizes: tuple[int, ...] = ()

    @property
    def n_tree_pairs(self) -> int:
        return len(self.tree_structure) // 2


@dataclass(frozen=True)
class TaskMetadata:
    """Task metadata words plus how they were derived.

    Attributes:
        words: Values passed as taskMetadata to the verifier
        layout: Detected output layout, None when no topology was supplied
        n_tasks_in_output: Task count read from the program output, if any
    """
    words: list[int] = field(default_factory=lambda: list(NO_TASKS))
    layout: Optional[OutputLayout] = None
    n_tasks_in_output: Optional[int] = None


# --- Fact Topologies ---

def _int_list(value: Any, path: str) -> tuple[int, ...]:
    if not isinstance(value, list) or not all(
        isinstance(v, int) and not isinstance(v, bool) and v >= 0 for v in value
    ):
        raise MalformedInput(path, "expected a list of non-negative integers")
    return tuple(value)


def parse_fact_topologies(j: Any) -> list[FactTopology]:
    """Parse {"fact_topologies": [...]} or a bare list of topologies."""
    if isinstance(j, dict):
        if "fact_topologies" not in j:
            raise MalformedInput("fact_topologies", "missing required field")
        j = j["fact_topologies"]
    if not isinstance(j, list):
        raise MalformedInput("fact_topologies", "expected a list")

    topologies = []
    for i, entry in enumerate(j):
        path = f"fact_topologies[{i}]"
        if not isinstance(entry, dict) or "tree_structure" not in entry:
            raise MalformedInput(f"{path}.tree_structure", "missing required field")
        tree = _int_list(entry["tree_structure"], f"{path}.tree_structure")
        if len(tree) % 2 != 0:
            raise MalformedInput(f"{path}.tree_structure", "must hold an even number of values")
        pages = _int_list(entry.get("page_sizes", []), f"{path}.page_sizes")
        topologies.append(FactTopology(tree_structure=tree, page_sizes=pages))
    return topologies


def load_fact_topologies(path: str) -> list[FactTopology]:
    """Load a fact_topologies.json side-channel file."""
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedInput(path, f"invalid JSON: {e}") from e
    return parse_fact_topologies(data)


# --- Program Output ---

def program_output(public_input: PublicInput) -> list[int]:
    """Values of the output segment [begin_addr, stop_ptr), read from public memory."""
    seg = public_input.memory_segments.get("output")
    if seg is None:
        raise MalformedInput("public_input.memory_segments.output", "missing output segment")

    memory = {cell.address: cell.value for cell in public_input.public_memory}
    output = []
    for addr in range(seg.begin_addr, seg.stop_ptr):
        if addr not in memory:
            raise MalformedInput(
                "public_input.public_memory",
                f"output address {addr} is not in public memory",
            )
        output.append(memory[addr])
    return output


def detect_output_layout(output: Sequence[int], threshold: int = DEFAULT_PREFIX_THRESHOLD) -> OutputLayout:
    """Pick the output framing from the magnitude of the first word."""
    if not output:
        raise MalformedInput("public_input.memory_segments.output", "program output is empty")
    return OutputLayout.BOOTLOADER_CONFIG if output[0] > threshold else OutputLayout.PLAIN


# --- Builder ---

def build_task_metadata(
    public_input: PublicInput,
    fact_topologies: Optional[Sequence[FactTopology]],
    threshold: int = DEFAULT_PREFIX_THRESHOLD,
) -> TaskMetadata:
    """Derive task metadata from the program output and fact topologies.

    Args:
        public_input: Parsed public input; supplies the output segment
        fact_topologies: Side-channel topologies, or None when there is no bootloader
        threshold: First-word bound separating the two output layouts

    Returns:
        TaskMetadata; words == [0] when fact_topologies is None
    """
    if fact_topologies is None:
        return TaskMetadata()

    output = program_output(public_input)
    layout = detect_output_layout(output, threshold)
    logger.info("Program output layout: %s (first word 0x%x)", layout.value, output[0])

    if layout.count_offset >= len(output):
        raise MalformedInput(
            "public_input.memory_segments.output",
            f"output of length {len(output)} has no task count at offset {layout.count_offset}",
        )
    n_tasks_in_output = output[layout.count_offset]

    n_tasks = len(fact_topologies)
    if n_tasks_in_output != n_tasks:
        logger.warning(
            "%s: program output declares %d tasks but %d fact topologies were supplied; "
            "using the fact topologies",
            TopologyMismatch.__name__, n_tasks_in_output, n_tasks,
        )

    words = [n_tasks]
    ptr = layout.tasks_offset
    for i, topology in enumerate(fact_topologies):
        if ptr + 1 >= len(output):
            raise MalformedInput(
                "public_input.memory_segments.output",
                f"task {i} header at offset {ptr} is past the end of the output ({len(output)} words)",
            )
        output_size, program_hash = output[ptr], output[ptr + 1]
        words.extend((output_size, program_hash, topology.n_tree_pairs))
        words.extend(topology.tree_structure)
        ptr += output_size

    return TaskMetadata(words=words, layout=layout, n_tasks_in_output=n_tasks_in_output)
