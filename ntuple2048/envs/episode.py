"""One game between a slider and a placer."""

import logging
import time
from dataclasses import dataclass, field

from ntuple2048.agents.base import Agent
from ntuple2048.core.action import Action
from ntuple2048.core.board import ILLEGAL, Board

_logger = logging.getLogger(__name__)


@dataclass
class Episode:
    """
    Game record and driver.

    Attributes
    ----------
    board : Board
        Current board, mutated as the game goes.
    score : int
        Sum of the slide rewards.
    moves : list[Action]
        Every applied action, placements included.
    """

    board: Board = field(default_factory=Board)
    score: int = 0
    moves: list[Action] = field(default_factory=list)
    started: float = 0.0
    finished: float = 0.0

    # ##: Tiles put on the board before the slider's first move.
    OPENING_TILES = 2

    @property
    def steps(self) -> int:
        """Number of slides played."""
        return sum(1 for move in self.moves if move.direction >= 0)

    @property
    def duration(self) -> float:
        return self.finished - self.started

    @property
    def max_tile(self) -> int:
        return self.board.max_tile()

    def apply(self, action: Action) -> bool:
        """Apply one action; return False when the board rejects it."""
        reward = action.apply(self.board)
        if reward == ILLEGAL:
            return False
        self.score += reward
        self.moves.append(action)
        return True

    def play(self, slider: Agent, placer: Agent) -> 'Episode':
        """
        Run the game to the end.

        The placer opens with two tiles, then slider and placer alternate until the slider has no legal
        move, the placer finds no empty cell, or an agent returns an action the board rejects.
        Both agents see ``open_episode`` before the first move and ``close_episode`` after the last.
        """
        slider.open_episode()
        placer.open_episode()
        self.started = time.perf_counter()

        for _ in range(self.OPENING_TILES):
            if not self.apply(placer.take_action(self.board)):
                _logger.warning('%s could not place an opening tile', placer.name)
                break

        while True:
            action = slider.take_action(self.board)
            if not action:
                break
            if not self.apply(action):
                _logger.warning('%s played illegal move %s, ending episode', slider.name, action)
                break

            action = placer.take_action(self.board)
            if not action:
                break
            if not self.apply(action):
                _logger.warning('%s played illegal placement %s, ending episode', placer.name, action)
                break

        self.finished = time.perf_counter()
        slider.close_episode()
        placer.close_episode()
        return self
