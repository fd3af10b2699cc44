"""
Agent configuration and the interface shared by sliders and placers.
"""

from dataclasses import dataclass, field

from numpy.random import Generator, default_rng

from ntuple2048.core.action import Action
from ntuple2048.core.board import Board
from ntuple2048.network.weights import parse_init_spec


def parse_options(args: str) -> dict[str, str]:
    """
    Split ``"key=value key2=value2"`` into a dictionary.

    A token without ``=`` is stored under its own name. Later tokens override earlier ones.
    """
    options = {}
    for token in args.split():
        key, sep, value = token.partition('=')
        options[key] = value if sep else token
    return options


def _to_int(key: str, value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(float(value))
    except ValueError as error:
        raise ValueError(f'option `{key}` expects a number, got `{value}`') from error


def _to_float(key: str, value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ValueError(f'option `{key}` expects a number, got `{value}`') from error


@dataclass
class AgentConfig:
    """
    Typed view of an agent's ``key=value`` options.

    Attributes
    ----------
    name, role : str
        Identification, ``unknown`` when not given.
    seed : int or None
        Seed of the agent's random generator.
    learning_rate : float
        The ``alpha`` option, 0 when not given.
    init : list[int] or None
        Table sizes from the ``init`` option.
    load, save : str or None
        Weight file paths.
    meta : dict[str, str]
        Every option as given, including unrecognised ones.
    """

    name: str = 'unknown'
    role: str = 'unknown'
    seed: int | None = None
    learning_rate: float = 0.0
    init: list[int] | None = None
    load: str | None = None
    save: str | None = None
    meta: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_args(cls, args: str = '') -> 'AgentConfig':
        """
        Parse an option string.

        Raises
        ------
        ValueError
            If ``seed`` or ``alpha`` is not a number.
        """
        config = cls(meta=parse_options('name=unknown role=unknown ' + args))
        config.refresh()
        return config

    def refresh(self) -> None:
        """Re-derive the typed fields from ``meta``."""
        self.name = self.meta.get('name', 'unknown')
        self.role = self.meta.get('role', 'unknown')
        self.seed = _to_int('seed', self.meta.get('seed'))
        self.learning_rate = _to_float('alpha', self.meta.get('alpha'), 0.0)
        self.init = parse_init_spec(self.meta['init']) if 'init' in self.meta else None
        self.load = self.meta.get('load')
        self.save = self.meta.get('save')

    def update(self, message: str) -> None:
        """
        Set one option from ``key=value`` and re-derive the typed fields.

        The options are left unchanged when the new value is rejected.

        Raises
        ------
        ValueError
            If the new value does not parse.
        """
        previous = dict(self.meta)
        key, sep, value = message.partition('=')
        self.meta[key] = value if sep else message
        try:
            self.refresh()
        except ValueError:
            self.meta = previous
            self.refresh()
            raise


class Agent:
    """
    Common interface of every agent.

    Subclasses override ``take_action`` and, when they keep per-episode state, ``open_episode`` and
    ``close_episode``. ``defaults`` are options applied before the caller's ``args``.
    """

    def __init__(self, args: str = '', defaults: str = ''):
        self.config = AgentConfig.from_args(f'{defaults} {args}'.strip())

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def role(self) -> str:
        return self.config.role

    def __repr__(self) -> str:
        return f'{type(self).__name__}(name={self.name!r}, role={self.role!r})'

    def open_episode(self, flag: str = '') -> None:
        pass

    def close_episode(self, flag: str = '') -> None:
        pass

    def take_action(self, board: Board) -> Action:
        return Action.null()

    def check_for_win(self, board: Board) -> bool:
        return False

    def property(self, key: str) -> str:
        """Raw option value; raises ``KeyError`` when the option was never set."""
        return self.config.meta[key]

    def notify(self, message: str) -> None:
        """Set one option at runtime from ``key=value``."""
        self.config.update(message)


class RandomAgent(Agent):
    """Agent owning a random generator seeded from the ``seed`` option."""

    def __init__(self, args: str = '', defaults: str = ''):
        super().__init__(args, defaults)
        self.rng: Generator = default_rng(self.config.seed)
