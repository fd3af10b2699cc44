"""
Board mechanics for the 4x4 sliding puzzle, expressed on tile ranks.

A cell holds 0 when empty and rank ``r`` for the tile ``2 ** r``. Cells are addressed row-major::

    | 0 | 1 | 2 | 3 |
    | 4 | 5 | 6 | 7 |
    | 8 | 9 | 10| 11|
    | 12| 13| 14| 15|
"""

from collections.abc import Sequence

from numpy import array_equal, asarray, int64, ndarray, rot90, zeros

# ##>: Reward returned for a move or placement that does not change the board.
ILLEGAL = -1

# ##>: Direction order used everywhere (rot90 count that brings the move to the left).
DIRECTIONS = ('left', 'up', 'right', 'down')


def merge_line(line: ndarray) -> tuple[int, list[int]]:
    """
    Slide one line of ranks towards index 0 and merge equal neighbours.

    Parameters
    ----------
    line : ndarray
        A 1D array of ranks.

    Returns
    -------
    score : int
        Sum of the values (not ranks) of the tiles created by merging.
    merged : list[int]
        The non-empty ranks after merging, in order.

    Notes
    -----
    - Each tile merges at most once per move.
    - Two tiles of rank ``r`` produce one tile of rank ``r + 1`` worth ``2 ** (r + 1)``.
    """
    tiles = [int(rank) for rank in line if rank != 0]
    merged: list[int] = []
    score = 0

    i = 0
    while i < len(tiles):
        if i + 1 < len(tiles) and tiles[i] == tiles[i + 1]:
            merged.append(tiles[i] + 1)
            score += 1 << (tiles[i] + 1)
            i += 2
        else:
            merged.append(tiles[i])
            i += 1
    return score, merged


def slide_left(grid: ndarray) -> tuple[int, ndarray]:
    """
    Slide every row of a rank grid to the left.

    Parameters
    ----------
    grid : ndarray
        A 2D array of ranks.

    Returns
    -------
    score : int
        Total merge score.
    result : ndarray
        The grid after the move.
    """
    result = zeros(grid.shape, dtype=int64)
    score = 0
    for i, row in enumerate(grid):
        row_score, merged = merge_line(row)
        score += row_score
        result[i, : len(merged)] = merged
    return score, result


def legal_actions_mask(grid: ndarray) -> tuple[bool, bool, bool, bool]:
    """
    Legality of (left, up, right, down) in a single pass over the grid.

    Parameters
    ----------
    grid : ndarray
        A 2D array of ranks.

    Returns
    -------
    tuple[bool, bool, bool, bool]
        True where the direction changes the board.
    """
    # ##>: Merges are symmetric, slides depend on the direction.
    left_cols, right_cols = grid[:, :-1], grid[:, 1:]
    top_rows, bottom_rows = grid[:-1, :], grid[1:, :]
    h_merge = bool(((left_cols != 0) & (left_cols == right_cols)).any())
    v_merge = bool(((top_rows != 0) & (top_rows == bottom_rows)).any())

    return (
        h_merge or bool(((left_cols == 0) & (right_cols != 0)).any()),
        v_merge or bool(((top_rows == 0) & (bottom_rows != 0)).any()),
        h_merge or bool(((right_cols == 0) & (left_cols != 0)).any()),
        v_merge or bool(((bottom_rows == 0) & (top_rows != 0)).any()),
    )


class Board:
    """
    Mutable 4x4 board of tile ranks.

    The board is the only object that knows the slide and merge rules. Agents read it through
    ``cells``, ``board(position)`` and ``empty_count()``, and simulate moves on a ``copy()``.
    """

    SIZE = 4

    def __init__(self, cells: Sequence[int] | ndarray | None = None):
        """
        Create a board.

        Parameters
        ----------
        cells : sequence of int or ndarray, optional
            16 ranks in row-major order, or a 4x4 array. Defaults to an empty board.
        """
        if cells is None:
            self._grid = zeros((self.SIZE, self.SIZE), dtype=int64)
        else:
            grid = asarray(cells, dtype=int64)
            if grid.size != self.SIZE * self.SIZE:
                raise ValueError(f'a board needs {self.SIZE * self.SIZE} cells, got {grid.size}')
            self._grid = grid.reshape(self.SIZE, self.SIZE).copy()
        self._cells: tuple[int, ...] | None = None

    def __call__(self, position: int) -> int:
        return self.cells[position]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return array_equal(self._grid, other._grid)

    def __repr__(self) -> str:
        return f'Board({list(self.cells)})'

    def __str__(self) -> str:
        lines = []
        for row in self._grid.tolist():
            lines.append(' '.join(f'{(1 << rank) if rank else 0:>6}' for rank in row))
        return '\n'.join(lines)

    @property
    def cells(self) -> tuple[int, ...]:
        """Row-major ranks as a tuple, cached until the next mutation."""
        if self._cells is None:
            self._cells = tuple(self._grid.ravel().tolist())
        return self._cells

    @property
    def is_finished(self) -> bool:
        """True when no direction is legal."""
        return not any(legal_actions_mask(self._grid))

    def copy(self) -> 'Board':
        return Board(self._grid)

    def empty_count(self) -> int:
        return self.cells.count(0)

    def empty_positions(self) -> list[int]:
        return [position for position, rank in enumerate(self.cells) if rank == 0]

    def max_tile(self) -> int:
        """Largest tile value on the board (0 when empty)."""
        rank = max(self.cells)
        return (1 << rank) if rank else 0

    def legal_actions(self) -> list[int]:
        mask = legal_actions_mask(self._grid)
        return [direction for direction in range(len(DIRECTIONS)) if mask[direction]]

    def slide(self, direction: int) -> int:
        """
        Apply a move in place.

        Parameters
        ----------
        direction : int
            0: left, 1: up, 2: right, 3: down.

        Returns
        -------
        int
            The merge reward, or ``ILLEGAL`` when the move changes nothing (the board is left untouched).
        """
        if direction not in range(len(DIRECTIONS)):
            return ILLEGAL
        if not legal_actions_mask(self._grid)[direction]:
            return ILLEGAL

        score, moved = slide_left(rot90(self._grid, k=direction))
        self._grid = rot90(moved, k=-direction).copy()
        self._cells = None
        return score

    def place(self, position: int, tile: int) -> int:
        """
        Put a tile of rank ``tile`` on an empty cell.

        Returns
        -------
        int
            0 on success, ``ILLEGAL`` when the cell is taken or out of range.
        """
        if position not in range(self.SIZE * self.SIZE) or tile <= 0:
            return ILLEGAL
        row, col = divmod(position, self.SIZE)
        if self._grid[row, col] != 0:
            return ILLEGAL
        self._grid[row, col] = tile
        self._cells = None
        return 0
