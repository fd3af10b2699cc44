"""Actions exchanged between agents and the board: slide, place, or nothing."""

from dataclasses import dataclass
from enum import Enum

from ntuple2048.core.board import DIRECTIONS, ILLEGAL, Board


class ActionKind(str, Enum):
    """What an action does to the board."""

    NONE = 'none'
    SLIDE = 'slide'
    PLACE = 'place'


@dataclass(frozen=True)
class Action:
    """
    One move in an episode.

    A slider returns ``Action.slide(direction)``, a placer returns ``Action.place(position, tile)``, and
    either returns ``Action.null()`` when it has nothing legal to do. The null action is falsy.
    """

    kind: ActionKind = ActionKind.NONE
    direction: int = -1
    position: int = -1
    tile: int = 0

    @classmethod
    def null(cls) -> 'Action':
        return cls()

    @classmethod
    def slide(cls, direction: int) -> 'Action':
        return cls(kind=ActionKind.SLIDE, direction=direction)

    @classmethod
    def place(cls, position: int, tile: int) -> 'Action':
        return cls(kind=ActionKind.PLACE, position=position, tile=tile)

    def __bool__(self) -> bool:
        return self.kind is not ActionKind.NONE

    def __str__(self) -> str:
        if self.kind is ActionKind.SLIDE:
            if self.direction not in range(len(DIRECTIONS)):
                return f'#{self.direction}'
            return f'#{DIRECTIONS[self.direction][0].upper()}'
        if self.kind is ActionKind.PLACE:
            return f'{1 << self.tile}@{self.position}'
        return '??'

    def apply(self, board: Board) -> int:
        """
        Apply the action to ``board`` in place.

        Returns
        -------
        int
            The reward, or ``ILLEGAL`` for the null action and for moves the board rejects.
        """
        if self.kind is ActionKind.SLIDE:
            return board.slide(self.direction)
        if self.kind is ActionKind.PLACE:
            return board.place(self.position, self.tile)
        return ILLEGAL
