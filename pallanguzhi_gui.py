"""PySide6 board window for Pallanguzhi."""

from __future__ import annotations

import sys
from typing import Iterator, List, Optional, Tuple

from PySide6.QtCore import Qt, QSettings, QTimer
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QDialog,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from pallanguzhi_engine import (
    CLASSIC,
    DEFAULT_SEEDS,
    PIT_COUNT,
    PITS_PER_SIDE,
    PLAYER_A,
    PLAYER_B,
    PLAYERS,
    RULESETS,
    IllegalMoveError,
    iter_sow_frames,
    number_for_pit,
    owner,
)
from pallanguzhi_game import REJECTED, Game, MoveOutcome

AI_PLAYER = PLAYER_B
AI_DELAY_MS = 450
ANIM_STEP_MS = {"Fast": 60, "Normal": 140, "Slow": 280}
SETTINGS_ORG = "pallanguzhi"
SETTINGS_APP = "pallanguzhi"

RULES_TEXT = (
    "Each player owns seven pits: A the bottom row, B the top row.\n\n"
    "Pick a non-empty pit on your side and sow its seeds one per pit, "
    "counter-clockwise. If the last seed lands in a pit that already held "
    "seeds, pick all of them up and keep sowing.\n\n"
    "Classic rules: when sowing ends in an empty pit on your own side, you "
    "capture every seed in the pit opposite it.\n\n"
    "The game ends when either side runs out of seeds. The side that still "
    "has seeds keeps them. Most captured seeds wins."
)


class PitButton(QPushButton):
    def __init__(self, index: int, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.index = index
        self.side = owner(index)
        self.pit_num = number_for_pit(index)
        self.setProperty("flash", False)
        self.setCursor(Qt.PointingHandCursor)
        self.setMinimumSize(64, 64)

    def set_flash(self, flash: bool) -> None:
        if self.property("flash") == flash:
            return
        self.setProperty("flash", flash)
        self.style().unpolish(self)
        self.style().polish(self)


class ScoreWidget(QFrame):
    def __init__(self, title: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("Score")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(4)

        self.title_label = QLabel(title)
        self.title_label.setObjectName("ScoreLabel")
        self.title_label.setAlignment(Qt.AlignCenter)

        self.count_label = QLabel("00")
        self.count_label.setObjectName("ScoreCount")
        self.count_label.setAlignment(Qt.AlignCenter)

        layout.addWidget(self.title_label)
        layout.addWidget(self.count_label)

    def set_count(self, value: int) -> None:
        self.count_label.setText(f"{value:02d}")


class RulesDialog(QDialog):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("How to play")
        layout = QVBoxLayout(self)
        text = QLabel(RULES_TEXT)
        text.setWordWrap(True)
        layout.addWidget(text)
        close_button = QPushButton("Close")
        close_button.clicked.connect(self.accept)
        layout.addWidget(close_button)


class PallanguzhiWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Pallanguzhi")
        self.setMinimumSize(900, 480)

        self.settings = QSettings(SETTINGS_ORG, SETTINGS_APP)
        self.game = Game()
        self.last_move_desc = "-"

        self.animating = False
        self.anim_frames: Optional[Iterator[Tuple[int, ...]]] = None
        self.anim_counts: Optional[Tuple[int, ...]] = None
        self.pending_pit: Optional[int] = None
        self.ai_request_id = 0

        self.pit_buttons: List[Optional[PitButton]] = [None] * PIT_COUNT

        self._build_ui()
        self.anim_timer = QTimer(self)
        self.anim_timer.timeout.connect(self._on_anim_tick)
        self._apply_style()
        self._load_persistent_settings()

        self.reset_game()

    def _build_ui(self) -> None:
        root = QWidget(self)
        self.setCentralWidget(root)
        main_layout = QHBoxLayout(root)
        main_layout.setContentsMargins(18, 18, 18, 18)
        main_layout.setSpacing(16)

        board_layout = QVBoxLayout()
        board_layout.setSpacing(12)

        self.score_b = ScoreWidget("PLAYER B")
        board_layout.addWidget(self.score_b)

        grid_frame = QFrame()
        grid_layout = QGridLayout(grid_frame)
        grid_layout.setContentsMargins(12, 12, 12, 12)
        grid_layout.setSpacing(12)

        for col in range(PITS_PER_SIDE):
            b_index = PIT_COUNT - 1 - col
            b_btn = PitButton(b_index)
            b_btn.clicked.connect(lambda _, b=b_btn: self.handle_pit_click(b))
            grid_layout.addWidget(b_btn, 0, col)
            self.pit_buttons[b_index] = b_btn

            a_index = col
            a_btn = PitButton(a_index)
            a_btn.clicked.connect(lambda _, b=a_btn: self.handle_pit_click(b))
            grid_layout.addWidget(a_btn, 1, col)
            self.pit_buttons[a_index] = a_btn

        board_layout.addWidget(grid_frame)

        self.score_a = ScoreWidget("PLAYER A")
        board_layout.addWidget(self.score_a)

        self.status_label = QLabel("-")
        self.status_label.setObjectName("Status")
        self.status_label.setAlignment(Qt.AlignCenter)
        board_layout.addWidget(self.status_label)

        side_widget = QFrame()
        side_widget.setObjectName("SidePanel")
        side_panel = QVBoxLayout(side_widget)
        side_panel.setContentsMargins(12, 12, 12, 12)
        side_panel.setSpacing(10)

        game_header = QLabel("New Game")
        game_header.setObjectName("SideHeader")
        side_panel.addWidget(game_header)

        self.seeds_spin = QSpinBox()
        self.seeds_spin.setRange(1, 12)
        self.seeds_spin.setValue(DEFAULT_SEEDS)
        self.seeds_spin.setPrefix("Seeds per pit: ")
        side_panel.addWidget(self.seeds_spin)

        self.rules_combo = QComboBox()
        self.rules_combo.addItems(list(RULESETS))
        self.rules_combo.setCurrentText(CLASSIC)
        side_panel.addWidget(self.rules_combo)

        self.first_combo = QComboBox()
        self.first_combo.addItems([f"Player {p} first" for p in PLAYERS])
        side_panel.addWidget(self.first_combo)

        self.new_button = QPushButton("New Game")
        self.new_button.clicked.connect(self.reset_game)
        side_panel.addWidget(self.new_button)

        self.undo_button = QPushButton("Undo")
        self.undo_button.clicked.connect(self.undo_move)
        side_panel.addWidget(self.undo_button)

        self.redo_button = QPushButton("Redo")
        self.redo_button.clicked.connect(self.redo_move)
        side_panel.addWidget(self.redo_button)

        self.rules_button = QPushButton("Rules")
        self.rules_button.clicked.connect(self.show_rules)
        side_panel.addWidget(self.rules_button)

        options_header = QLabel("Options")
        options_header.setObjectName("SideHeader")
        side_panel.addWidget(options_header)

        self.ai_check = QCheckBox(f"Computer plays {AI_PLAYER}")
        self.ai_check.setChecked(False)
        self.ai_check.toggled.connect(self._on_ai_toggled)
        side_panel.addWidget(self.ai_check)

        self.animate_check = QCheckBox("Animate sowing")
        self.animate_check.setChecked(True)
        side_panel.addWidget(self.animate_check)

        self.speed_combo = QComboBox()
        self.speed_combo.addItems(list(ANIM_STEP_MS))
        self.speed_combo.setCurrentText("Normal")
        side_panel.addWidget(self.speed_combo)

        last_header = QLabel("Last Move")
        last_header.setObjectName("SideHeader")
        side_panel.addWidget(last_header)

        self.last_move_label = QLabel("-")
        self.last_move_label.setObjectName("LastMove")
        self.last_move_label.setWordWrap(True)
        side_panel.addWidget(self.last_move_label)

        side_panel.addStretch(1)

        main_layout.addLayout(board_layout, 3)
        main_layout.addWidget(side_widget, 1)

    def _apply_style(self) -> None:
        app = QApplication.instance()
        if app is not None:
            app.setStyle("Fusion")
            app.setFont(QFont("Avenir", 11))

        self.setStyleSheet(
            """
            QMainWindow {
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                    stop:0 #5a3b22, stop:1 #6e4a2c);
            }
            QLabel { color: #f7f3ea; }
            QLabel#SideHeader { font-weight: 600; margin-top: 8px; }
            QLabel#Status { font-size: 16px; font-weight: 700; }
            QLabel#LastMove { color: #f0e6d6; }
            QFrame#SidePanel {
                background: rgba(20, 12, 6, 0.35);
                border: 1px solid rgba(255, 255, 255, 0.08);
                border-radius: 14px;
            }
            QFrame#Score {
                background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                    stop:0 #b8834f, stop:1 #a46f3e);
                border-radius: 18px;
                border: 2px solid #7a4b23;
            }
            QLabel#ScoreLabel { font-size: 12px; letter-spacing: 1px; }
            QLabel#ScoreCount { font-size: 24px; font-weight: 700; color: #fff7e6; }
            QPushButton {
                background: #f2e0c2;
                border: 2px solid #b08a5a;
                border-radius: 28px;
                min-height: 56px;
                min-width: 56px;
                color: #3b2a1a;
                font-weight: 600;
            }
            QPushButton:disabled {
                background: #e1d2b8;
                color: #9c8c78;
                border-color: #c7b193;
            }
            QPushButton[flash="true"] {
                border: 3px solid #f4c542;
                background: #fff0c8;
            }
            QCheckBox { color: #f7f3ea; }
            QSpinBox, QComboBox {
                background: #f7f3ea;
                color: #2d2013;
                border-radius: 6px;
                padding: 4px 6px;
            }
            """
        )

    def reset_game(self) -> None:
        if self.animating:
            return
        first = PLAYERS[self.first_combo.currentIndex()]
        self.game.new_game(self.seeds_spin.value(), first, self.rules_combo.currentText())
        self.last_move_desc = "-"
        self.anim_counts = None
        self.ai_request_id += 1
        self.refresh_ui()
        self._maybe_schedule_ai()

    def undo_move(self) -> None:
        if self.animating or not self.game.undo():
            return
        self.last_move_desc = "Undo"
        self.ai_request_id += 1
        self.refresh_ui()
        self._maybe_schedule_ai()

    def redo_move(self) -> None:
        if self.animating or not self.game.redo():
            return
        self.last_move_desc = "Redo"
        self.ai_request_id += 1
        self.refresh_ui()
        self._maybe_schedule_ai()

    def show_rules(self) -> None:
        RulesDialog(self).exec()

    def handle_pit_click(self, button: PitButton) -> None:
        if self.animating or self.game.is_game_over():
            return
        if button.side != self.game.get_active_player():
            return
        if self.ai_check.isChecked() and button.side == AI_PLAYER:
            return
        self.apply_move(button.index)

    def apply_move(self, pit: int) -> None:
        if self.animating:
            return
        if pit not in self.game.legal_moves():
            self.status_label.setText("Illegal move: choose a non-empty pit on your side.")
            return
        if self.animate_check.isChecked():
            self.start_animation(pit)
        else:
            self.commit_move(pit)

    def start_animation(self, pit: int) -> None:
        try:
            frames = list(iter_sow_frames(self.game.state, pit))
        except IllegalMoveError:
            # Let the game reject it and report the reason.
            self.commit_move(pit)
            return
        self.animating = True
        self.pending_pit = pit
        self.anim_frames = iter(frames)
        self.anim_timer.setInterval(ANIM_STEP_MS.get(self.speed_combo.currentText(), ANIM_STEP_MS["Normal"]))
        self.update_controls()
        self.anim_timer.start()

    def _on_anim_tick(self) -> None:
        if self.anim_frames is None:
            self.anim_timer.stop()
            return
        try:
            self.anim_counts = next(self.anim_frames)
        except StopIteration:
            self._finish_animation()
            return
        self.update_board()

    def _finish_animation(self) -> None:
        self.anim_timer.stop()
        pit = self.pending_pit
        self.anim_frames = None
        self.anim_counts = None
        self.pending_pit = None
        self.animating = False
        if pit is not None:
            self.commit_move(pit)

    def commit_move(self, pit: int) -> MoveOutcome:
        outcome = self.game.play_move(pit)
        self.last_move_desc = self._describe_outcome(outcome)
        self.refresh_ui()
        if outcome.status != REJECTED and outcome.trace is not None:
            self._flash_landing(outcome.trace.landing)
        self._maybe_schedule_ai()
        return outcome

    def _describe_outcome(self, outcome: MoveOutcome) -> str:
        if outcome.status == REJECTED or outcome.trace is None:
            return f"Rejected: {outcome.reason}"
        trace = outcome.trace
        text = f"Player {trace.mover} pit {number_for_pit(trace.picked_index)}"
        if trace.relays:
            text += f", {len(trace.relays)} relay(s)"
        if trace.capture is not None:
            text += f", captured {trace.capture.captured_count}"
        if trace.sweep_a or trace.sweep_b:
            text += f", swept A {trace.sweep_a} / B {trace.sweep_b}"
        return text

    def _flash_landing(self, pit: int) -> None:
        button = self.pit_buttons[pit]
        if button is None:
            return
        button.set_flash(True)
        QTimer.singleShot(400, lambda: button.set_flash(False))

    def _on_ai_toggled(self, _checked: bool) -> None:
        self.ai_request_id += 1
        self.refresh_ui()
        self._maybe_schedule_ai()

    def _maybe_schedule_ai(self) -> None:
        if (
            self.ai_check.isChecked()
            and self.game.get_active_player() == AI_PLAYER
            and not self.game.is_game_over()
            and not self.animating
        ):
            expected_request = self.ai_request_id

            def _ai_turn() -> None:
                if self.ai_request_id != expected_request:
                    return
                if self.game.get_active_player() != AI_PLAYER or self.game.is_game_over() or self.animating:
                    return
                pit = self.game.request_ai_move()
                if pit is not None:
                    self.apply_move(pit)

            QTimer.singleShot(AI_DELAY_MS, _ai_turn)

    def _display_counts(self) -> Tuple[int, ...]:
        if self.anim_counts is not None:
            return self.anim_counts
        return self.game.get_pits()

    def refresh_ui(self) -> None:
        self.update_board()
        self.update_status()
        self.update_controls()

    def update_board(self) -> None:
        counts = self._display_counts()
        captured = self.game.get_captured()
        self.score_a.set_count(captured[PLAYER_A])
        self.score_b.set_count(captured[PLAYER_B])

        legal = set(self.game.legal_moves())
        ai_side = AI_PLAYER if self.ai_check.isChecked() else None
        for index, button in enumerate(self.pit_buttons):
            if button is None:
                continue
            button.setText(f"{counts[index]:02d}")
            button.setEnabled(not self.animating and index in legal and button.side != ai_side)

    def update_status(self) -> None:
        if self.game.is_game_over():
            result = self.game.get_winner()
            headline = f"Player {result} wins!" if result in PLAYERS else "It's a draw!"
            self.status_label.setText(f"Game over: {headline}")
        elif self.animating:
            self.status_label.setText(f"Player {self.game.get_active_player()} is sowing...")
        else:
            self.status_label.setText(f"Player {self.game.get_active_player()} to move")
        self.last_move_label.setText(self.last_move_desc)

    def update_controls(self) -> None:
        allow_actions = not self.animating
        self.new_button.setEnabled(allow_actions)
        self.undo_button.setEnabled(allow_actions and self.game.can_undo())
        self.redo_button.setEnabled(allow_actions and self.game.can_redo())

    @staticmethod
    def _to_bool(value: object, default: bool) -> bool:
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    def _load_persistent_settings(self) -> None:
        self.animate_check.setChecked(self._to_bool(self.settings.value("animation/enabled"), True))
        speed = self.settings.value("animation/speed")
        if isinstance(speed, str) and speed in ANIM_STEP_MS:
            self.speed_combo.setCurrentText(speed)
        self.ai_check.blockSignals(True)
        self.ai_check.setChecked(self._to_bool(self.settings.value("game/ai_enabled"), False))
        self.ai_check.blockSignals(False)
        rules = self.settings.value("game/ruleset")
        if isinstance(rules, str) and rules in RULESETS:
            self.rules_combo.setCurrentText(rules)

    def _save_persistent_settings(self) -> None:
        self.settings.setValue("animation/enabled", self.animate_check.isChecked())
        self.settings.setValue("animation/speed", self.speed_combo.currentText())
        self.settings.setValue("game/ai_enabled", self.ai_check.isChecked())
        self.settings.setValue("game/ruleset", self.rules_combo.currentText())
        self.settings.sync()

    def closeEvent(self, event) -> None:
        self.ai_request_id += 1
        self.anim_timer.stop()
        self._save_persistent_settings()
        super().closeEvent(event)


def main() -> int:
    app = QApplication(sys.argv)
    window = PallanguzhiWindow()
    window.show()
    if window.settings.value("ui/rules_shown") is None:
        window.settings.setValue("ui/rules_shown", True)
        window.show_rules()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
