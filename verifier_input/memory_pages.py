"""Public memory pages and their commitments.

Public memory is split by page id. The verifier commits to the two kinds of
pages through two different MemoryPageFactRegistry paths:

- Page 0 is the regular page. It is registered as interleaved
  (address, value) pairs, and its hash covers both.
- Every page with id > 0 is a continuous page. It is registered as a start
  address plus a dense array of values, and its hash covers the values only.

Hashing addresses for a continuous page, or dropping them for the regular
page, produces a hash the verifier will not recognise.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from cairo_primitives.field import CAIRO_PRIME
from cairo_primitives.keccak import hash_words
from verifier_input.errors import ArithmeticInconsistency, MalformedInput
from verifier_input.proof import MemoryCell

logger = logging.getLogger(__name__)

REGULAR_PAGE_ID = 0

# Dense continuous pages are materialised in memory.
MAX_CONTINUOUS_PAGE_SPAN = 2**28

# --- Type Aliases ---
Cell = tuple[int, int]  # (address, value)


# --- Page Hashes ---

def regular_page_hash(memory_pairs: Iterable[int]) -> int:
    """keccak256 over [addr0, value0, addr1, value1, ...] as 32-byte words."""
    return hash_words(memory_pairs)


def continuous_page_hash(values: Iterable[int]) -> int:
    """keccak256 over the page values as 32-byte words; addresses are not hashed."""
    return hash_words(values)


# --- Page Structures ---

@dataclass
class RegularPage:
    """Page 0 in registration form."""
    memory_pairs: list[int] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.memory_pairs) // 2

    @property
    def hash(self) -> int:
        return regular_page_hash(self.memory_pairs)


@dataclass
class ContinuousPage:
    """A page with id > 0 in registration form: values[i] lives at start_address + i."""
    page: int
    start_address: int
    values: list[int] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.values)

    @property
    def hash(self) -> int:
        return continuous_page_hash(self.values)


@dataclass(frozen=True)
class PageInfo:
    """Per-page view used by the public input assembler.

    Attributes:
        page: Page id
        size: Number of cells the page registers
        hash: Page commitment
        start_address: First address for continuous pages, None for page 0
        cells: (address, value) pairs in original encounter order
    """
    page: int
    size: int
    hash: int
    start_address: Optional[int]
    cells: tuple[Cell, ...]


@dataclass
class MemoryPageFacts:
    """Registration data for all public memory pages.

    Attributes:
        regular_page: Page 0, or None when no cell lives on page 0
        continuous_pages: Pages with id > 0, ascending by id
        page_cells: Cells of every page in encounter order, keyed by page id
    """
    regular_page: Optional[RegularPage] = None
    continuous_pages: list[ContinuousPage] = field(default_factory=list)
    page_cells: dict[int, list[Cell]] = field(default_factory=dict)

    @property
    def n_pages(self) -> int:
        return (1 if self.regular_page is not None else 0) + len(self.continuous_pages)

    def sorted_pages(self) -> list[PageInfo]:
        """Pages ascending by id, page 0 first when present."""
        pages = []
        if self.regular_page is not None:
            pages.append(PageInfo(
                page=REGULAR_PAGE_ID,
                size=self.regular_page.size,
                hash=self.regular_page.hash,
                start_address=None,
                cells=tuple(self.page_cells[REGULAR_PAGE_ID]),
            ))
        for cp in self.continuous_pages:
            pages.append(PageInfo(
                page=cp.page,
                size=cp.size,
                hash=cp.hash,
                start_address=cp.start_address,
                cells=tuple(self.page_cells[cp.page]),
            ))
        return pages


# --- Construction ---

def group_cells_by_page(public_memory: Iterable[MemoryCell]) -> dict[int, list[Cell]]:
    """Group (address, value) pairs by page id, keeping encounter order within a page."""
    pages: dict[int, list[Cell]] = {}
    for cell in public_memory:
        pages.setdefault(cell.page, []).append((cell.address, cell.value))
    return pages


def build_continuous_page(page: int, cells: list[Cell]) -> ContinuousPage:
    """Lay out a page densely over [min address, max address].

    Addresses in range with no cell are filled with the field's zero element.

    Raises:
        ArithmeticInconsistency: If the address span is not materialisable
        MalformedInput: If an address appears twice with different values
    """
    start = min(addr for addr, _ in cells)
    end = max(addr for addr, _ in cells)
    span = end - start + 1
    if span > MAX_CONTINUOUS_PAGE_SPAN or end >= CAIRO_PRIME:
        raise ArithmeticInconsistency(
            f"continuous page {page} spans {span} addresses from {start}, "
            f"which does not fit addressable memory"
        )

    values = [0] * span
    seen: dict[int, int] = {}
    for addr, value in cells:
        if addr in seen and seen[addr] != value:
            raise MalformedInput(
                f"public_input.public_memory(page={page}, address={addr})",
                f"conflicting values 0x{seen[addr]:x} and 0x{value:x}",
            )
        seen[addr] = value
        values[addr - start] = value

    n_gaps = span - len(seen)
    if n_gaps:
        logger.debug("Continuous page %d: filled %d missing addresses with zero", page, n_gaps)

    return ContinuousPage(page=page, start_address=start, values=values)


def build_memory_page_facts(public_memory: Iterable[MemoryCell]) -> MemoryPageFacts:
    """Partition public memory into the regular page and continuous pages."""
    page_cells = group_cells_by_page(public_memory)

    regular_page = None
    if REGULAR_PAGE_ID in page_cells:
        pairs = []
        for addr, value in page_cells[REGULAR_PAGE_ID]:
            pairs.extend((addr, value))
        regular_page = RegularPage(memory_pairs=pairs)

    continuous_pages = [
        build_continuous_page(page, page_cells[page])
        for page in sorted(page_cells)
        if page != REGULAR_PAGE_ID
    ]

    logger.debug(
        "Memory pages: regular=%s, continuous=%d",
        regular_page.size if regular_page else None,
        len(continuous_pages),
    )
    return MemoryPageFacts(
        regular_page=regular_page,
        continuous_pages=continuous_pages,
        page_cells=page_cells,
    )
