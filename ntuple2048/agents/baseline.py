"""
Agents without learning: random and greedy sliders, and the random tile placer.
"""

from ntuple2048.agents.base import RandomAgent
from ntuple2048.core.action import Action
from ntuple2048.core.board import ILLEGAL, Board

# ##>: New tile ranks and their probabilities (2 with 90%, 4 with 10%).
TILE_RANKS = (1, 2)
TILE_PROBS = (0.9, 0.1)


def _rewards(board: Board, directions) -> dict[int, int]:
    """Reward of every legal direction, in the given order."""
    rewards = {}
    for direction in directions:
        reward = board.copy().slide(direction)
        if reward != ILLEGAL:
            rewards[direction] = reward
    return rewards


class RandomPlacer(RandomAgent):
    """Place a new tile on a random empty cell."""

    def __init__(self, args: str = ''):
        super().__init__(args, defaults='name=place role=placer')

    def take_action(self, board: Board) -> Action:
        empty = board.empty_positions()
        if not empty:
            return Action.null()
        position = int(self.rng.choice(empty))
        tile = int(self.rng.choice(TILE_RANKS, p=TILE_PROBS))
        return Action.place(position, tile)


class RandomSlider(RandomAgent):
    """Pick a legal direction uniformly."""

    def __init__(self, args: str = ''):
        super().__init__(args, defaults='name=slide role=slider')

    def take_action(self, board: Board) -> Action:
        legal = board.legal_actions()
        if not legal:
            return Action.null()
        return Action.slide(int(self.rng.choice(legal)))


class GreedySlider(RandomAgent):
    """
    Take the direction with the best immediate reward.

    Ties go to the first direction in enumeration order; when no move merges anything, the first legal
    direction is taken.
    """

    directions = (0, 1, 2, 3)

    def __init__(self, args: str = '', defaults: str = 'name=greedy role=slider'):
        super().__init__(args, defaults)

    def take_action(self, board: Board) -> Action:
        rewards = _rewards(board, self.directions)
        if not rewards:
            return Action.null()
        best = max(rewards, key=rewards.__getitem__)
        return Action.slide(best)


class RestrictedGreedySlider(GreedySlider):
    """
    Greedy over left and down only; up and right are used when nothing else is legal.

    Keeping the large tiles in one corner this way beats the plain greedy slider.
    """

    directions = (0, 3)
    fallback = (1, 2)

    def __init__(self, args: str = ''):
        super().__init__(args, defaults='name=restricted role=slider')

    def take_action(self, board: Board) -> Action:
        preferred = _rewards(board, self.directions)
        if preferred:
            # ##>: Among equal rewards the later preferred direction wins.
            best = max(reversed(list(preferred)), key=preferred.__getitem__)
            return Action.slide(best)

        forced = _rewards(board, self.fallback)
        if not forced:
            return Action.null()
        return Action.slide(max(forced, key=forced.__getitem__))
