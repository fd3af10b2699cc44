"""
N-tuple network slider trained by backward temporal-difference learning.

The value of a board is the sum, over every base feature and every member of its symmetry orbit, of
the weight the member's index addresses in the base feature's table. Moves are chosen by one-ply
afterstate search; learning happens once per episode, walking the recorded trajectory backwards.
"""

import logging
from collections.abc import Sequence
from typing import NamedTuple

from ntuple2048.agents.base import Agent
from ntuple2048.core.action import Action
from ntuple2048.core.board import DIRECTIONS, ILLEGAL, Board
from ntuple2048.network.feature import IsoFeature
from ntuple2048.network.weights import WeightTable, init_weights, load_weights, save_weights

_logger = logging.getLogger(__name__)

# ##>: Two 6-tuples along the edge and two 2x3 blocks in the middle.
# ##: The centred block (5, 6, 7, 9, 10, 11) has a 4-member orbit, so the default network is not symmetric.
DEFAULT_FEATURES: tuple[tuple[int, ...], ...] = (
    (0, 1, 2, 3, 4, 5),
    (4, 5, 6, 7, 8, 9),
    (5, 6, 7, 9, 10, 11),
    (9, 10, 11, 13, 14, 15),
)


class Step(NamedTuple):
    """One recorded decision: the board before the move and the move's reward."""

    state: Board
    reward: float


class NTupleAgent(Agent):
    """
    Afterstate n-tuple network slider.

    Options
    -------
    alpha
        Learning rate, shared among all active features.
    init
        Comma-separated table sizes; zero tables sized from the features are used when absent.
    load, save
        Weight files read at construction and written by ``close()``.

    The agent is a context manager; leaving the ``with`` block saves the weights when ``save`` is set.
    """

    def __init__(self, args: str = '', features: Sequence[Sequence[int]] = DEFAULT_FEATURES):
        super().__init__(args, defaults='name=ntuple role=slider')
        self.features = [IsoFeature(positions) for positions in features]
        self.active_features = sum(len(iso) for iso in self.features)
        self.trajectory: list[Step] = []

        if self.config.load is not None:
            self.tables = load_weights(self.config.load)
        elif self.config.init is not None:
            self.tables = init_weights(self.config.init)
        else:
            self.tables = init_weights(iso.table_size for iso in self.features)
        self._check_tables(self.tables)

    def __enter__(self) -> 'NTupleAgent':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def learning_rate(self) -> float:
        return self.config.learning_rate

    def _check_tables(self, tables: Sequence[WeightTable]) -> None:
        if len(tables) != len(self.features):
            raise ValueError(f'{len(self.features)} features need as many weight tables, got {len(tables)}')
        for iso, table in zip(self.features, tables):
            if len(table) != iso.table_size:
                raise ValueError(f'{iso!r} needs a table of {iso.table_size} weights, got {len(table)}')

    def value(self, board: Board) -> float:
        """Estimated value of ``board``."""
        total = 0.0
        for iso, table in zip(self.features, self.tables):
            values = table.values
            for feature in iso:
                total += float(values[feature.index(board)])
        return total

    def take_action(self, board: Board) -> Action:
        """
        Choose the move maximising reward plus afterstate value.

        The first direction reaching the maximum wins. The board before the move is recorded with the
        chosen reward, or with 0 when no move is legal, in which case the null action is returned.
        """
        best_direction, best_estimate, best_reward = None, float('-inf'), 0
        for direction in range(len(DIRECTIONS)):
            after = board.copy()
            reward = after.slide(direction)
            if reward == ILLEGAL:
                continue
            estimate = self.value(after) + reward
            if estimate > best_estimate:
                best_direction, best_estimate, best_reward = direction, estimate, reward

        self.trajectory.append(Step(board.copy(), best_reward))
        if best_direction is None:
            return Action.null()
        return Action.slide(best_direction)

    def update_weight(self, target: float, state: Board) -> None:
        """
        Move the value of ``state`` towards ``target``.

        The error is measured once, then split evenly over every active feature; an index addressed by
        two orbit members in the same table is moved twice.
        """
        delta = self.learning_rate / self.active_features * (target - self.value(state))
        for iso, table in zip(self.features, self.tables):
            table.add([feature.index(state) for feature in iso], delta)

    def open_episode(self, flag: str = '') -> None:
        self.trajectory.clear()

    def close_episode(self, flag: str = '') -> None:
        """
        Learn from the finished episode, last step first.

        The terminal board is pulled towards 0; every earlier board towards its reward plus the freshly
        updated value of the board that followed it.
        """
        if not self.trajectory:
            _logger.warning('%s: episode closed without any recorded step', self.name)
            return

        terminal = self.trajectory.pop()
        self.update_weight(0.0, terminal.state)

        previous = terminal.state
        while self.trajectory:
            step = self.trajectory.pop()
            self.update_weight(step.reward + self.value(previous), step.state)
            previous = step.state

    def save(self, path: str | None = None) -> None:
        """Write the tables to ``path``, or to the ``save`` option."""
        path = path or self.config.save
        if path is None:
            raise ValueError('no path given and no `save` option set')
        save_weights(path, self.tables)

    def close(self) -> None:
        if self.config.save is not None:
            self.save()
