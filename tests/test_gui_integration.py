import os
import tempfile
import unittest
from unittest.mock import patch

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PySide6.QtCore import QSettings
    from PySide6.QtTest import QTest
    from PySide6.QtWidgets import QApplication

    import pallanguzhi_gui as gui_mod
    from pallanguzhi_engine import CLASSIC, PLAYER_A, PLAYER_B, State

    HAS_QT = True
except Exception:
    HAS_QT = False


@unittest.skipUnless(HAS_QT, "PySide6 is required for GUI integration tests")
class TestGUIIntegration(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.prev_format = QSettings.defaultFormat()
        QSettings.setDefaultFormat(QSettings.IniFormat)
        QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, self.temp_dir.name)

        self.org_patch = patch.object(gui_mod, "SETTINGS_ORG", "pallanguzhi_test_org")
        self.app_patch = patch.object(gui_mod, "SETTINGS_APP", "pallanguzhi_test_app")
        self.delay_patch = patch.object(gui_mod, "AI_DELAY_MS", 0)
        self.org_patch.start()
        self.app_patch.start()
        self.delay_patch.start()

        self.window = gui_mod.PallanguzhiWindow()
        self.window.animate_check.setChecked(False)

    def tearDown(self) -> None:
        if self.window is not None:
            self.window.close()
            self.app.processEvents()
        self.delay_patch.stop()
        self.app_patch.stop()
        self.org_patch.stop()
        QSettings.setDefaultFormat(self.prev_format)
        self.temp_dir.cleanup()

    def test_initial_board(self) -> None:
        self.assertEqual([b.text() for b in self.window.pit_buttons], ["05"] * 14)
        self.assertTrue(self.window.pit_buttons[0].isEnabled())
        self.assertFalse(self.window.pit_buttons[7].isEnabled())
        self.assertFalse(self.window.undo_button.isEnabled())
        self.assertEqual(self.window.status_label.text(), "Player A to move")

    def test_click_plays_move_and_undo_redo(self) -> None:
        self.window.handle_pit_click(self.window.pit_buttons[0])
        self.assertEqual(self.window.game.get_active_player(), PLAYER_B)
        self.assertTrue(self.window.undo_button.isEnabled())
        self.assertIn("Player A pit 1", self.window.last_move_label.text())

        self.window.undo_move()
        self.assertEqual(self.window.game.get_pits(), (5,) * 14)
        self.assertTrue(self.window.redo_button.isEnabled())
        self.window.redo_move()
        self.assertEqual(self.window.game.get_active_player(), PLAYER_B)

    def test_click_on_opponent_pit_is_ignored(self) -> None:
        self.window.handle_pit_click(self.window.pit_buttons[10])
        self.assertEqual(self.window.game.get_pits(), (5,) * 14)
        self.assertFalse(self.window.game.can_undo())

    def test_animation_reveals_frames_then_commits(self) -> None:
        self.window.animate_check.setChecked(True)
        self.window.apply_move(0)
        self.assertTrue(self.window.animating)
        self.assertFalse(self.window.new_button.isEnabled())
        self.window.anim_timer.stop()

        self.window._on_anim_tick()
        self.assertEqual(self.window.pit_buttons[0].text(), "00")
        self.assertEqual(self.window.game.get_pits(), (5,) * 14)

        for _ in range(500):
            if not self.window.animating:
                break
            self.window._on_anim_tick()
        self.assertFalse(self.window.animating)
        self.assertEqual(self.window.game.get_active_player(), PLAYER_B)
        self.assertTrue(self.window.new_button.isEnabled())

    def test_computer_answers_for_b(self) -> None:
        self.window.ai_check.setChecked(True)
        self.window.handle_pit_click(self.window.pit_buttons[0])
        QTest.qWait(100)
        self.assertEqual(self.window.game.history.past_depth, 2)
        self.assertIn("Player B", self.window.last_move_label.text())

    def test_computer_replays_after_undo_to_its_turn(self) -> None:
        self.window.ai_check.setChecked(True)
        self.window.handle_pit_click(self.window.pit_buttons[0])
        QTest.qWait(100)
        self.assertEqual(self.window.game.history.past_depth, 2)

        self.window.undo_move()
        self.assertEqual(self.window.game.get_active_player(), PLAYER_B)
        QTest.qWait(100)
        self.assertEqual(self.window.game.history.past_depth, 2)
        self.assertEqual(self.window.game.get_active_player(), PLAYER_A)

    def test_endless_relay_is_rejected_while_animating(self) -> None:
        self.window.animate_check.setChecked(True)
        self.window.game.state = State(
            PLAYER_A, (0, 6, 1, 2, 0, 3, 0, 1, 0, 1, 0, 1, 0, 4), 60, 61, CLASSIC, 10
        )
        self.window.refresh_ui()
        self.window.apply_move(3)
        self.assertFalse(self.window.animating)
        self.assertFalse(self.window.game.can_undo())
        self.assertIn("relays endlessly", self.window.last_move_label.text())

    def test_game_over_status(self) -> None:
        self.window.game.state = State(PLAYER_A, (0, 0, 0, 0, 0, 0, 1, 0, 2, 0, 0, 3, 0, 0), 3, 4, CLASSIC, 5)
        self.window.refresh_ui()
        self.window.apply_move(6)
        self.assertEqual(self.window.status_label.text(), "Game over: Player B wins!")
        self.assertTrue(all(not b.isEnabled() for b in self.window.pit_buttons))

    def test_new_game_uses_controls(self) -> None:
        self.window.seeds_spin.setValue(3)
        self.window.first_combo.setCurrentIndex(1)
        self.window.reset_game()
        self.assertEqual(self.window.game.get_pits(), (3,) * 14)
        self.assertEqual(self.window.game.get_active_player(), PLAYER_B)

    def test_settings_persist_across_windows(self) -> None:
        self.window.speed_combo.setCurrentText("Slow")
        self.window.rules_combo.setCurrentText("southern")
        self.window._save_persistent_settings()
        self.window.close()
        self.window = None

        restored = gui_mod.PallanguzhiWindow()
        self.assertFalse(restored.animate_check.isChecked())
        self.assertEqual(restored.speed_combo.currentText(), "Slow")
        self.assertEqual(restored.rules_combo.currentText(), "southern")
        self.assertEqual(restored.game.state.ruleset, "southern")
        self.assertEqual(restored.game.get_active_player(), PLAYER_A)
        restored.close()


if __name__ == "__main__":
    unittest.main()
