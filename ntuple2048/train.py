"""
Train or evaluate a slider against the random placer.

Example::

    python -m ntuple2048.train --total 100000 --block 1000 --slide "alpha=0.1 save=weights.bin"
"""

import logging
import sys
from argparse import ArgumentParser

from tqdm import trange

from ntuple2048.agents import GreedySlider, NTupleAgent, RandomPlacer, RandomSlider, RestrictedGreedySlider
from ntuple2048.envs import Episode, Statistics
from ntuple2048.network import WeightFileError

_logger = logging.getLogger(__name__)

SLIDERS = {
    'ntuple': NTupleAgent,
    'random': RandomSlider,
    'greedy': GreedySlider,
    'restricted': RestrictedGreedySlider,
}


def run(slider, placer, total: int, block: int = 0, progress: bool = True) -> Statistics:
    """
    Play ``total`` episodes between ``slider`` and ``placer``.

    Returns
    -------
    Statistics
        Every episode, plus a summary per completed block.
    """
    stats = Statistics(total=total, block=block)
    with trange(total, disable=not progress) as period:
        for num in period:
            episode = Episode().play(slider, placer)
            stats.add(episode)

            # ##: Log.
            period.set_description(f'Episode: {num + 1}')
            period.set_postfix(score=episode.score, max=episode.max_tile)
    return stats


def main(argv: list[str] | None = None) -> int:
    parser = ArgumentParser(description='Play 2048 episodes with an n-tuple network or a baseline slider.')
    parser.add_argument('--total', type=int, default=1000, help='episodes to play')
    parser.add_argument('--block', type=int, default=0, help='episodes per statistics block (0: none)')
    parser.add_argument('--slider', choices=sorted(SLIDERS), default='ntuple')
    parser.add_argument('--slide', type=str, default='', help='slider options, e.g. "alpha=0.1 load=w.bin"')
    parser.add_argument('--place', type=str, default='', help='placer options, e.g. "seed=42"')
    parser.add_argument('--summary', action='store_true', help='log a summary of all episodes at the end')
    parser.add_argument('--log-level', type=str, default='INFO')
    parser.add_argument('--no-progress', action='store_true')
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        slider = SLIDERS[args.slider](args.slide)
    except WeightFileError as error:
        _logger.critical('%s', error)
        return 1
    placer = RandomPlacer(args.place)

    stats = run(slider, placer, total=args.total, block=args.block, progress=not args.no_progress)
    if args.summary and stats.episodes:
        for line in Statistics.summarize(stats.episodes, index=len(stats.episodes)).lines():
            _logger.info(line)

    if isinstance(slider, NTupleAgent):
        try:
            slider.close()
        except WeightFileError as error:
            _logger.critical('%s', error)
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
