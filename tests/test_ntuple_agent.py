"""
Tests for the n-tuple network agent: evaluation, move selection, TD learning and persistence.
"""

import os
import tempfile
from unittest import TestCase, main
from unittest.mock import patch

import numpy as np

from ntuple2048.agents.ntuple import DEFAULT_FEATURES, NTupleAgent, Step
from ntuple2048.core.action import ActionKind
from ntuple2048.core.board import Board
from ntuple2048.network.feature import REFLECTION, ROTATION, IsoFeature
from ntuple2048.network.weights import WeightFileError, WeightTable, save_weights

# ##>: Small tuples keep the tables at 16**4 entries; neither cell set is symmetric.
SMALL_FEATURES = ((0, 1, 2, 4), (1, 2, 3, 5))

FINISHED = Board([1, 2, 1, 2, 2, 1, 2, 1, 1, 2, 1, 2, 2, 1, 2, 1])


def symmetries() -> list[tuple[int, ...]]:
    """The 8 cell permutations of the square."""
    result = []
    for start in (tuple(range(16)), REFLECTION):
        current = tuple(start)
        for _ in range(4):
            result.append(current)
            current = tuple(ROTATION[p] for p in current)
    return result


def transformed(board: Board, mapping: tuple[int, ...]) -> Board:
    cells = [0] * 16
    for p, rank in enumerate(board.cells):
        cells[mapping[p]] = rank
    return Board(cells)


def random_weights(agent: NTupleAgent, seed: int = 0) -> None:
    rng = np.random.default_rng(seed)
    for table in agent.tables:
        table.values[:] = rng.normal(size=len(table))


class TestEvaluation(TestCase):
    """Value function."""

    def setUp(self):
        self.agent = NTupleAgent(features=SMALL_FEATURES)

    def test_fresh_agent_values_zero(self):
        self.assertEqual(self.agent.value(Board([1, 2, 3] + [0] * 13)), 0.0)

    def test_tables_match_features(self):
        self.assertEqual([len(table) for table in self.agent.tables], [16**4, 16**4])
        self.assertEqual(self.agent.active_features, 16)

    def test_default_features(self):
        """Three tuples have full orbits; the centred 2x3 block has four members."""
        self.assertEqual([len(IsoFeature(f)) for f in DEFAULT_FEATURES], [8, 8, 4, 8])

    def test_value_sums_every_orbit_member(self):
        """On an empty board every member reads index 0."""
        agent = NTupleAgent(features=((0, 1),))
        agent.tables[0][0] = 0.5
        self.assertAlmostEqual(agent.value(Board()), 8 * 0.5)

    def test_value_invariant_under_symmetry(self):
        random_weights(self.agent)
        rng = np.random.default_rng(1)
        for _ in range(5):
            board = Board(rng.integers(0, 12, size=16))
            expected = self.agent.value(board)
            for mapping in symmetries():
                with self.subTest(mapping=mapping):
                    self.assertAlmostEqual(self.agent.value(transformed(board, mapping)), expected, places=4)

    def test_value_does_not_modify_board(self):
        board = Board([1, 1, 2] + [0] * 13)
        before = board.copy()
        self.agent.value(board)
        self.assertEqual(board, before)


class TestActionSelection(TestCase):
    """One-ply afterstate search and trajectory recording."""

    def setUp(self):
        self.agent = NTupleAgent(features=SMALL_FEATURES)
        self.agent.open_episode()

    def test_chosen_move_is_best(self):
        random_weights(self.agent, seed=3)
        rng = np.random.default_rng(5)
        for _ in range(10):
            board = Board(rng.integers(0, 5, size=16))
            if board.is_finished:
                continue

            estimates = {}
            for direction in board.legal_actions():
                after = board.copy()
                reward = after.slide(direction)
                estimates[direction] = self.agent.value(after) + reward

            action = self.agent.take_action(board)
            self.assertEqual(action.kind, ActionKind.SLIDE)
            for estimate in estimates.values():
                self.assertGreaterEqual(estimates[action.direction], estimate)

    def test_tie_goes_to_first_direction(self):
        """With zero weights, left and right both merge for 4; left is enumerated first."""
        action = self.agent.take_action(Board([1, 1] + [0] * 14))
        self.assertEqual(action.direction, 0)
        self.assertEqual(self.agent.trajectory[-1].reward, 4)

    def test_negative_estimates_are_eligible(self):
        """Moves are chosen even when every afterstate value is negative."""
        for table in self.agent.tables:
            table.values[:] = -10.0
        action = self.agent.take_action(Board([1] + [0] * 15))
        self.assertEqual(action.direction, 2)

    def test_records_pre_move_board(self):
        board = Board([1, 1] + [0] * 14)
        self.agent.take_action(board)
        step = self.agent.trajectory[-1]
        self.assertEqual(step.state, board)
        self.assertIsNot(step.state, board)

    def test_terminal_board(self):
        """No legal move: null action and one entry with reward 0."""
        action = self.agent.take_action(FINISHED)
        self.assertFalse(action)
        self.assertEqual(len(self.agent.trajectory), 1)
        self.assertEqual(self.agent.trajectory[0], Step(FINISHED, 0))

    def test_one_entry_per_call(self):
        board = Board([1, 1] + [0] * 14)
        for count in range(1, 4):
            self.agent.take_action(board)
            self.assertEqual(len(self.agent.trajectory), count)
        self.agent.take_action(FINISHED)
        self.assertEqual(len(self.agent.trajectory), 4)

    def test_open_episode_clears(self):
        self.agent.take_action(Board([1, 1] + [0] * 14))
        self.agent.open_episode()
        self.assertEqual(self.agent.trajectory, [])


class TestLearning(TestCase):
    """Backward TD update."""

    def test_update_moves_value_towards_target(self):
        agent = NTupleAgent('alpha=0.1', features=SMALL_FEATURES)
        board = Board([1, 2, 0, 3] + [0] * 12)
        agent.update_weight(100.0, board)
        self.assertGreater(agent.value(board), 0.0)
        self.assertLess(agent.value(board), 100.0)

    def test_update_with_aliased_indices(self):
        """Orbit members that address the same slot each apply the step."""
        agent = NTupleAgent('alpha=0.1', features=((0, 1),))
        agent.tables[0].values[:] = 1.0
        board = Board([1] + [0] * 15)

        # ##>: Two members read cell 0 (index 0x10), the six others read empty cells (index 0).
        self.assertAlmostEqual(agent.value(board), 8.0)
        agent.update_weight(0.0, board)
        self.assertAlmostEqual(float(agent.tables[0][0]), 1.0 - 6 * 0.1, places=5)
        self.assertAlmostEqual(float(agent.tables[0][0x10]), 1.0 - 2 * 0.1, places=5)
        self.assertAlmostEqual(agent.value(board), 4.0, places=5)

    def test_zero_learning_rate_keeps_weights(self):
        agent = NTupleAgent(features=SMALL_FEATURES)
        agent.update_weight(50.0, Board([1, 2] + [0] * 14))
        self.assertFalse(any(table.values.any() for table in agent.tables))

    def test_single_step_episode(self):
        """A single recorded step is treated as terminal and updated towards 0 once."""
        agent = NTupleAgent('alpha=0.1', features=SMALL_FEATURES)
        state = Board([1, 1] + [0] * 14)
        agent.trajectory.append(Step(state, 4))

        with patch.object(agent, 'update_weight', wraps=agent.update_weight) as update:
            agent.close_episode()
        update.assert_called_once_with(0.0, state)
        self.assertEqual(agent.trajectory, [])

    def test_backward_targets(self):
        """The earlier step's target is its reward plus the value of the following board."""
        agent = NTupleAgent('alpha=0.1', features=SMALL_FEATURES)
        first = Board([1, 1] + [0] * 14)
        last = Board([2, 1] + [0] * 14)
        agent.trajectory.extend([Step(first, 4), Step(last, 0)])

        with patch.object(agent, 'update_weight', wraps=agent.update_weight) as update:
            agent.close_episode()

        self.assertEqual(update.call_count, 2)
        (terminal_target, terminal_state), _ = update.call_args_list[0]
        (target, state), _ = update.call_args_list[1]
        self.assertEqual((terminal_target, terminal_state), (0.0, last))
        self.assertEqual(state, first)
        self.assertEqual(target, 4.0)

    def test_close_empties_trajectory(self):
        agent = NTupleAgent('alpha=0.1', features=SMALL_FEATURES)
        agent.open_episode()
        board = Board([1, 1, 2, 0, 0, 3] + [0] * 10)
        while True:
            action = agent.take_action(board)
            if not action:
                break
            action.apply(board)
            board.place(board.empty_positions()[0], 1)
        agent.close_episode()
        self.assertEqual(agent.trajectory, [])
        self.assertTrue(any(table.values.any() for table in agent.tables))

    def test_close_without_steps(self):
        agent = NTupleAgent(features=SMALL_FEATURES)
        with self.assertLogs('ntuple2048.agents.ntuple', level='WARNING'):
            agent.close_episode()


class TestPersistence(TestCase):
    """Weights across agents."""

    def setUp(self):
        self._directory = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._directory.name, 'weights.bin')

    def tearDown(self):
        self._directory.cleanup()

    def test_round_trip_reproduces_values(self):
        with NTupleAgent(f'save={self.path}', features=SMALL_FEATURES) as agent:
            random_weights(agent, seed=11)
            boards = [Board(np.random.default_rng(i).integers(0, 10, size=16)) for i in range(5)]
            expected = [agent.value(board) for board in boards]

        loaded = NTupleAgent(f'load={self.path}', features=SMALL_FEATURES)
        self.assertEqual([loaded.value(board) for board in boards], expected)

    def test_init_option_sizes_tables(self):
        agent = NTupleAgent('init=65536,65536', features=SMALL_FEATURES)
        self.assertEqual([len(table) for table in agent.tables], [65536, 65536])

    def test_mismatched_tables(self):
        with self.assertRaises(ValueError):
            NTupleAgent('init=16', features=SMALL_FEATURES)

        save_weights(self.path, [WeightTable(16**4)])
        with self.assertRaises(ValueError):
            NTupleAgent(f'load={self.path}', features=SMALL_FEATURES)

    def test_missing_load_file(self):
        with self.assertRaises(WeightFileError):
            NTupleAgent(f'load={os.path.join(self._directory.name, "missing.bin")}', features=SMALL_FEATURES)

    def test_close_without_save_path(self):
        agent = NTupleAgent(features=SMALL_FEATURES)
        agent.close()
        self.assertFalse(os.path.exists(self.path))
        with self.assertRaises(ValueError):
            agent.save()

    def test_save_to_explicit_path(self):
        agent = NTupleAgent(features=SMALL_FEATURES)
        agent.save(self.path)
        self.assertTrue(os.path.exists(self.path))


if __name__ == '__main__':
    main()
