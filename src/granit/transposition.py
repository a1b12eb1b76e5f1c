from dataclasses import dataclass
from typing import List, Optional, Sequence

from .keys import key_lookup, validate_order


@dataclass
class Box:
    """
    Rectangular arrangement of symbols for one transposition stage.

    The grid is uneven when `total` is not a multiple of `columns`: the first
    `long_columns` columns hold `height` rows, the others one row less.
    Cells start out empty (None) and are filled by the box operations.
    """

    columns: int
    total: int
    cells: Optional[List[Optional[str]]] = None

    def __post_init__(self) -> None:
        if self.columns < 1:
            raise ValueError("A box needs at least one column.")
        if self.cells is None:
            self.cells = [None] * (self.height * self.columns)

    @property
    def height(self) -> int:
        return -(-self.total // self.columns)

    @property
    def long_columns(self) -> int:
        return self.total % self.columns

    def column_height(self, col: int) -> int:
        """Number of rows in an (unsorted) column."""
        if self.long_columns == 0 or col < self.long_columns:
            return self.height
        return self.height - 1

    def rows(self) -> List[List[Optional[str]]]:
        return [self.cells[start : start + self.columns] for start in range(0, len(self.cells), self.columns)]

    def read_rows(self) -> List[str]:
        """Read the box row by row, checking that every symbol is in place."""
        symbols = [cell for cell in self.cells if cell is not None]
        if len(symbols) != self.total:
            raise ValueError(f"Box holds {len(symbols)} of {self.total} symbols.")
        return symbols


def fill_box(columns: int, symbols: Sequence[str]) -> Box:
    """Write symbols into a box row by row."""
    box = Box(columns, len(symbols))
    box.cells[: len(symbols)] = list(symbols)
    return box


def sort_box(box: Box, order: Sequence[int]) -> Box:
    """Move every column to the position given by the key order."""
    validate_order(order, box.columns)
    sorted_box = Box(box.columns, box.total)
    for i, cell in enumerate(box.cells):
        if cell is None:
            continue
        row, col = divmod(i, box.columns)
        sorted_box.cells[row * box.columns + order[col]] = cell
    return sorted_box


def read_columns(box: Box) -> List[str]:
    """Read a box column by column, skipping the gaps of short columns."""
    height = box.height
    text: List[Optional[str]] = [None] * len(box.cells)
    for i, cell in enumerate(box.cells):
        row, col = divmod(i, box.columns)
        text[col * height + row] = cell
    return [symbol for symbol in text if symbol is not None]


def transpose(symbols: Sequence[str], order: Sequence[int]) -> List[str]:
    """Columnar transposition of `symbols` with a key order (encrypt direction)."""
    return read_columns(sort_box(fill_box(len(order), symbols), order))


def fill_box_inverse(symbols: Sequence[str], order: Sequence[int]) -> Box:
    """
    Fill a box column by column in key order, undoing `transpose`.

    The n-th column read out during encryption is the original column
    `lookup[n]`; it is as long as that original column was, and columns
    without any rows (fewer symbols than columns) are passed over.
    """
    columns = len(order)
    validate_order(order, columns)
    lookup = key_lookup(order)
    box = Box(columns, len(symbols))

    row = 0
    col = 0
    for symbol in symbols:
        to_col = lookup[col]
        while box.column_height(to_col) == 0:
            col += 1
            to_col = lookup[col]

        box.cells[row * columns + to_col] = symbol
        row += 1

        if row == box.column_height(to_col):
            row = 0
            col += 1

    return box


def untranspose(symbols: Sequence[str], order: Sequence[int]) -> List[str]:
    """Inverse of `transpose` for the same key order."""
    return fill_box_inverse(symbols, order).read_rows()
