import json
import tempfile
import unittest
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import cli
from pallanguzhi_game import REJECTED, MoveOutcome


def run_cli(argv, inputs):
    feed = iter(inputs)
    out = StringIO()
    with (
        patch("builtins.input", side_effect=lambda _prompt="": next(feed)),
        patch("sys.stdout", new=out),
        patch.object(cli.time, "sleep", return_value=None),
    ):
        rc = cli.main(argv)
    return rc, out.getvalue()


class TestCLI(unittest.TestCase):
    def test_read_command_reprompts_on_empty(self):
        with patch("builtins.input", side_effect=["", "3"]), patch("sys.stdout", new=StringIO()):
            raw = cli.read_command("Move: ")
        self.assertEqual(raw, "3")

    def test_read_command_eof_quits(self):
        with patch("builtins.input", side_effect=EOFError), patch("sys.stdout", new=StringIO()):
            raw = cli.read_command("Move: ")
        self.assertEqual(raw, "q")

    def test_quit_immediately(self):
        rc, out = run_cli([], ["q"])
        self.assertEqual(rc, 0)
        self.assertIn("Turn: Player A", out)

    def test_negative_seeds_rejected(self):
        with patch("sys.stdout", new=StringIO()):
            rc = cli.main(["--seeds", "-1"])
        self.assertEqual(rc, 2)

    def test_play_undo_redo(self):
        rc, out = run_cli([], ["1", "u", "r", "r", "q"])
        self.assertEqual(rc, 0)
        self.assertIn("Player A sowed pit 1", out)
        self.assertIn("Turn: Player B", out)
        self.assertIn("Nothing to redo.", out)

    def test_nothing_to_undo(self):
        _, out = run_cli([], ["u", "q"])
        self.assertIn("Nothing to undo.", out)

    def test_bad_input_and_opponent_pit(self):
        _, out = run_cli([], ["9", "x", "h", "q"])
        self.assertIn("Please enter a pit number 1-7", out)
        self.assertIn("Controls:", out)

    def test_player_b_numbering(self):
        _, out = run_cli(["--first", "B"], ["1", "q"])
        self.assertIn("Player B sowed pit 1", out)

    def test_computer_side_moves_without_input(self):
        _, out = run_cli(["--ai", "A"], ["q"])
        self.assertIn("Computer (Player A) plays pit", out)
        self.assertIn("Player A sowed pit", out)

    def test_hint_and_ai_command(self):
        _, out = run_cli(["--hint"], ["a", "q"])
        self.assertIn("Hint: pit", out)
        self.assertIn("Player A sowed pit", out)

    def test_animation_prints_frames(self):
        _, out = run_cli(["--animate-ms", "5"], ["1", "q"])
        self.assertIn("B [", out)
        self.assertIn("A [ 0", out)

    def test_game_over_prompt(self):
        _, out = run_cli(["--seeds", "0"], ["q"])
        self.assertIn("Game over. A 0 - B 0. It's a draw!", out)

    def test_telemetry_log(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "events.jsonl"
            run_cli(["--telemetry-log", str(path)], ["1", "q"])
            lines = path.read_text(encoding="utf-8").splitlines()
        events = [json.loads(line)["event"] for line in lines]
        self.assertEqual(events[0], "game_start")
        self.assertIn("move_applied", events)

    def test_describe_rejected_outcome(self):
        outcome = MoveOutcome(REJECTED, 3, reason="illegal move: pit 3 is empty")
        self.assertEqual(cli.describe_outcome(outcome), "Move rejected (illegal move: pit 3 is empty).")


if __name__ == "__main__":
    unittest.main()
