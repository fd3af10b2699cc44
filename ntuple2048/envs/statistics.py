"""
Block statistics over finished episodes.

Every ``block`` episodes a summary is computed over the last block: mean and max score, moves per
second, and for each max tile reached the share of episodes that reached at least that tile.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field

from numpy import mean

from ntuple2048.envs.episode import Episode

_logger = logging.getLogger(__name__)


@dataclass
class BlockSummary:
    """Aggregates of one block of episodes."""

    index: int
    episodes: int
    mean_score: float
    max_score: int
    ops_per_second: float
    tiles: dict[int, tuple[float, float]]

    def lines(self) -> list[str]:
        """
        Human readable report.

        Each tile line shows the share of episodes reaching at least the tile, then the share ending
        exactly on it.
        """
        lines = [f'{self.index}\tavg = {self.mean_score:.0f}, max = {self.max_score}, ops = {self.ops_per_second:.0f}']
        for tile, (reached, ended) in sorted(self.tiles.items()):
            lines.append(f'\t{tile}\t{reached * 100:.1f}%\t({ended * 100:.1f}%)')
        return lines


@dataclass
class Statistics:
    """
    Collects episodes and summarises them in blocks.

    Attributes
    ----------
    total : int
        Episodes to play in total.
    block : int
        Episodes per summary; 0 disables summaries.
    """

    total: int
    block: int = 0
    episodes: list[Episode] = field(default_factory=list)
    summaries: list[BlockSummary] = field(default_factory=list)

    @property
    def is_finished(self) -> bool:
        return len(self.episodes) >= self.total

    def add(self, episode: Episode) -> BlockSummary | None:
        """Record ``episode``; return the block summary when it completes a block."""
        self.episodes.append(episode)
        if self.block and len(self.episodes) % self.block == 0:
            summary = self.summarize(self.episodes[-self.block :], index=len(self.episodes))
            self.summaries.append(summary)
            for line in summary.lines():
                _logger.info(line)
            return summary
        return None

    @staticmethod
    def summarize(episodes: list[Episode], index: int = 0) -> BlockSummary:
        """
        Aggregate a list of episodes.

        Raises
        ------
        ValueError
            If ``episodes`` is empty.
        """
        if not episodes:
            raise ValueError('cannot summarise an empty block')

        scores = [episode.score for episode in episodes]
        steps = sum(episode.steps for episode in episodes)
        duration = sum(episode.duration for episode in episodes)

        ended = Counter(episode.max_tile for episode in episodes)
        tiles = {}
        remaining = len(episodes)
        for tile in sorted(ended):
            tiles[tile] = (remaining / len(episodes), ended[tile] / len(episodes))
            remaining -= ended[tile]

        return BlockSummary(
            index=index,
            episodes=len(episodes),
            mean_score=float(mean(scores)),
            max_score=int(max(scores)),
            ops_per_second=steps / duration if duration > 0 else 0.0,
            tiles=tiles,
        )
