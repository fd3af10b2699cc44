"""
N-tuple features and their symmetry orbits.

A feature is an ordered tuple of board positions; its index packs one 4-bit rank per position, most
significant first. The position ``HINT`` (-1) reads the number of empty cells instead of a cell.

An ``IsoFeature`` expands one base feature by the 8 symmetries of the square so that every rotation
and reflection of a position shares the same weight slot.
"""

from collections.abc import Iterator, Sequence

from ntuple2048.core.board import Board

# ##>: Sentinel position standing for the empty-cell count.
HINT = -1

# ##>: Bits per position in a feature index, and the largest value a nibble can hold.
NIBBLE = 4
NIBBLE_MAX = (1 << NIBBLE) - 1

# ##>: ROTATION[p] is where cell p lands after a quarter turn; REFLECTION mirrors on the anti-diagonal.
ROTATION = (12, 8, 4, 0, 13, 9, 5, 1, 14, 10, 6, 2, 15, 11, 7, 3)
REFLECTION = (15, 11, 7, 3, 14, 10, 6, 2, 13, 9, 5, 1, 12, 8, 4, 0)


class Feature:
    """
    One tuple of board positions.

    Parameters
    ----------
    positions : sequence of int
        Cell positions in ``0..15``, plus at most one ``HINT``. Order matters for the index, not for the
        symmetry hash.

    Raises
    ------
    ValueError
        If a position is out of range, repeated, or the sentinel appears twice.
    """

    __slots__ = ('_positions', '_has_hint', '_hash')

    def __init__(self, positions: Sequence[int]):
        positions = tuple(int(p) for p in positions)
        if not positions:
            raise ValueError('a feature needs at least one position')
        if len(set(positions)) != len(positions):
            raise ValueError(f'duplicate position in feature {positions}')
        for p in positions:
            if p != HINT and not 0 <= p < Board.SIZE * Board.SIZE:
                raise ValueError(f'position {p} is not on the board')

        self._positions = positions
        self._has_hint = HINT in positions

        cells = 0
        for p in positions:
            if p != HINT:
                cells |= 1 << p
        self._hash = -cells if self._has_hint else cells

    def __len__(self) -> int:
        return len(self._positions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return self._hash == other._hash

    def __hash__(self) -> int:
        return hash(self._hash)

    def __repr__(self) -> str:
        return f'Feature({list(self._positions)})'

    @property
    def positions(self) -> tuple[int, ...]:
        return self._positions

    @property
    def table_size(self) -> int:
        """Number of distinct indices, i.e. the weight table length for this feature."""
        return 1 << (NIBBLE * len(self._positions))

    def symmetry_hash(self) -> int:
        """Bit set of the real positions, negated when the feature carries the empty-count slot."""
        return self._hash

    def index(self, board: Board) -> int:
        """
        Pack the ranks under this feature into one integer.

        Parameters
        ----------
        board : Board
            The board to read. It is not modified.

        Returns
        -------
        int
            A value in ``range(self.table_size)``.

        Raises
        ------
        ValueError
            If a covered cell holds a rank above ``NIBBLE_MAX`` (15), which does not fit its slot.
        """
        cells = board.cells
        empty = min(cells.count(0), NIBBLE_MAX) if self._has_hint else 0

        idx = 0
        for p in self._positions:
            rank = empty if p == HINT else cells[p]
            if rank > NIBBLE_MAX:
                raise ValueError(f'rank {rank} at position {p} exceeds {NIBBLE_MAX}')
            idx = (idx << NIBBLE) | rank
        return idx

    def transform(self, mapping: Sequence[int]) -> 'Feature':
        """Map every real position through a 16-entry permutation; the sentinel keeps its slot."""
        return Feature([p if p == HINT else mapping[p] for p in self._positions])


class IsoFeature:
    """
    The symmetry orbit of a base feature.

    Variants are generated by four quarter turns of the base and four quarter turns of its reflection,
    sorted by symmetry hash and deduplicated, so a feature whose cell set is symmetric keeps fewer than
    8 members.
    """

    def __init__(self, base: Feature | Sequence[int]):
        self.base = base if isinstance(base, Feature) else Feature(base)

        variants = []
        for start in (self.base, self.base.transform(REFLECTION)):
            current = start
            for _ in range(4):
                variants.append(current)
                current = current.transform(ROTATION)

        # ##>: Stable sort keeps the first generated representative of each hash.
        variants.sort(key=lambda feature: feature.symmetry_hash(), reverse=True)
        unique: list[Feature] = []
        for feature in variants:
            if not unique or unique[-1].symmetry_hash() != feature.symmetry_hash():
                unique.append(feature)
        self.features = tuple(unique)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)

    def __repr__(self) -> str:
        return f'IsoFeature({list(self.base.positions)}, orbit={len(self.features)})'

    @property
    def table_size(self) -> int:
        return self.base.table_size
