import unittest

from pallanguzhi_engine import EmptyHistoryError, apply_move, initial_state
from pallanguzhi_history import History


class TestHistory(unittest.TestCase):
    def setUp(self) -> None:
        self.history = History()
        self.s0 = initial_state()
        self.s1 = apply_move(self.s0, 2)
        self.s2 = apply_move(self.s1, 9)

    def test_undo_and_redo_walk_the_stacks(self):
        self.history.record(self.s0)
        self.history.record(self.s1)

        self.assertEqual(self.history.undo(self.s2), self.s1)
        self.assertEqual(self.history.undo(self.s1), self.s0)
        self.assertFalse(self.history.can_undo())
        self.assertEqual(self.history.future_depth, 2)

        self.assertEqual(self.history.redo(self.s0), self.s1)
        self.assertEqual(self.history.redo(self.s1), self.s2)
        self.assertFalse(self.history.can_redo())
        self.assertEqual(self.history.past_depth, 2)

    def test_record_clears_future(self):
        self.history.record(self.s0)
        self.history.undo(self.s1)
        self.assertTrue(self.history.can_redo())
        self.history.record(self.s0)
        self.assertFalse(self.history.can_redo())

    def test_empty_stacks_are_noops(self):
        self.assertIsNone(self.history.undo(self.s0))
        self.assertIsNone(self.history.redo(self.s0))
        self.assertEqual(self.history.snapshot(), ((), ()))

    def test_step_methods_raise_on_empty(self):
        with self.assertRaises(EmptyHistoryError):
            self.history.step_back(self.s0)
        with self.assertRaises(EmptyHistoryError):
            self.history.step_forward(self.s0)

    def test_snapshots_are_not_altered_by_later_moves(self):
        self.history.record(self.s0)
        apply_move(self.s0, 4)
        apply_move(self.s1, 9)
        past, _ = self.history.snapshot()
        self.assertEqual(past[0].pits, (5,) * 14)
        self.assertEqual(past[0], initial_state())

    def test_clear(self):
        self.history.record(self.s0)
        self.history.undo(self.s1)
        self.history.record(self.s1)
        self.history.clear()
        self.assertFalse(self.history.can_undo())
        self.assertFalse(self.history.can_redo())


if __name__ == "__main__":
    unittest.main()
