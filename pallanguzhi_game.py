"""Turn controller owning the live Pallanguzhi game state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pallanguzhi_ai as ai
from pallanguzhi_engine import (
    CLASSIC,
    DEFAULT_SEEDS,
    PLAYER_A,
    PLAYER_B,
    IllegalMoveError,
    MoveTrace,
    State,
    apply_move_with_info,
    initial_state,
    is_terminal,
    legal_moves,
    winner,
)
from pallanguzhi_history import History
from pallanguzhi_telemetry import (
    AIChoiceEvent,
    CaptureEvent,
    GameOverEvent,
    GameStartEvent,
    HistoryStepEvent,
    MoveAppliedEvent,
    MoveRejectedEvent,
    NullTelemetrySink,
    TelemetrySink,
    emit_dataclass_event,
)

ACCEPTED = "accepted"
REJECTED = "rejected"
GAME_OVER = "game_over"

REASON_IN_PROGRESS = "move in progress"
REASON_GAME_OVER = "game is over"
REASON_NO_MOVES = "no legal moves"


@dataclass(frozen=True)
class MoveOutcome:
    status: str
    pit: Optional[int]
    reason: Optional[str] = None
    winner: Optional[str] = None
    trace: Optional[MoveTrace] = None

    @property
    def accepted(self) -> bool:
        return self.status != REJECTED


class Game:
    """
    Single owner of the live ``State``.

    Moves are validated before anything changes. A rejected move leaves the
    board, the active player, the captured totals and both history stacks as
    they were, and reports the reason in the returned ``MoveOutcome``.
    """

    def __init__(
        self,
        seeds_per_pit: int = DEFAULT_SEEDS,
        first_player: str = PLAYER_A,
        ruleset: str = CLASSIC,
        telemetry_sink: Optional[TelemetrySink] = None,
    ) -> None:
        self.telemetry_sink: TelemetrySink = telemetry_sink if telemetry_sink is not None else NullTelemetrySink()
        self.history = History()
        self.state: State = initial_state(seeds_per_pit, first_player, ruleset)
        self.last_trace: Optional[MoveTrace] = None
        self._resolving = False
        self._announce_start()

    def new_game(
        self,
        seeds_per_pit: int = DEFAULT_SEEDS,
        first_player: str = PLAYER_A,
        ruleset: str = CLASSIC,
    ) -> None:
        state = initial_state(seeds_per_pit, first_player, ruleset)
        self.state = state
        self.history.clear()
        self.last_trace = None
        self._announce_start()

    def _announce_start(self) -> None:
        emit_dataclass_event(
            self.telemetry_sink,
            "game_start",
            GameStartEvent(
                seeds_per_pit=self.state.seeds_per_pit,
                first_player=self.state.to_move,
                ruleset=self.state.ruleset,
            ),
        )

    def get_pits(self) -> Tuple[int, ...]:
        return self.state.pits

    def get_active_player(self) -> str:
        return self.state.to_move

    def get_captured(self) -> Dict[str, int]:
        return {PLAYER_A: self.state.captured_a, PLAYER_B: self.state.captured_b}

    def is_game_over(self) -> bool:
        return is_terminal(self.state)

    def get_winner(self) -> Optional[str]:
        return winner(self.state)

    def legal_moves(self) -> List[int]:
        if self.is_game_over():
            return []
        return legal_moves(self.state)

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def play_move(self, pit: int) -> MoveOutcome:
        if self._resolving:
            return self._reject(pit, REASON_IN_PROGRESS)
        self._resolving = True
        try:
            return self._resolve(pit)
        finally:
            self._resolving = False

    def _resolve(self, pit: int) -> MoveOutcome:
        prev_state = self.state
        try:
            if self.is_game_over():
                raise IllegalMoveError(REASON_GAME_OVER)
            info = apply_move_with_info(prev_state, pit)
        except IllegalMoveError as exc:
            return self._reject(pit, str(exc))

        self.history.record(prev_state)
        self.state = info.state
        self.last_trace = info.trace
        trace = info.trace

        emit_dataclass_event(
            self.telemetry_sink,
            "move_applied",
            MoveAppliedEvent(
                mover=trace.mover,
                pit=pit,
                picked_count=trace.picked_count,
                drops=len(trace.drops),
                relays=len(trace.relays),
                landing=trace.landing,
                captured=trace.capture.captured_count if trace.capture is not None else None,
                terminal_after=trace.terminal_after,
                pits=list(self.state.pits),
            ),
        )
        if trace.capture is not None:
            emit_dataclass_event(
                self.telemetry_sink,
                "capture",
                CaptureEvent(
                    player=trace.capture.player,
                    landing_index=trace.capture.landing_index,
                    opposite_index=trace.capture.opposite_index,
                    captured_count=trace.capture.captured_count,
                ),
            )

        if trace.terminal_after:
            result = winner(self.state)
            emit_dataclass_event(
                self.telemetry_sink,
                "game_over",
                GameOverEvent(
                    winner=result,
                    captured_a=self.state.captured_a,
                    captured_b=self.state.captured_b,
                    sweep_a=trace.sweep_a,
                    sweep_b=trace.sweep_b,
                ),
            )
            return MoveOutcome(GAME_OVER, pit, winner=result, trace=trace)
        return MoveOutcome(ACCEPTED, pit, trace=trace)

    def _reject(self, pit: int, reason: str) -> MoveOutcome:
        emit_dataclass_event(
            self.telemetry_sink,
            "move_rejected",
            MoveRejectedEvent(player=self.state.to_move, pit=pit, reason=reason),
        )
        return MoveOutcome(REJECTED, pit, reason=reason)

    def undo(self) -> bool:
        if self._resolving:
            return False
        previous = self.history.undo(self.state)
        if previous is None:
            return False
        self.state = previous
        self.last_trace = None
        self._announce_history_step("undo")
        return True

    def redo(self) -> bool:
        if self._resolving:
            return False
        following = self.history.redo(self.state)
        if following is None:
            return False
        self.state = following
        self.last_trace = None
        self._announce_history_step("redo")
        return True

    def _announce_history_step(self, event: str) -> None:
        emit_dataclass_event(
            self.telemetry_sink,
            event,
            HistoryStepEvent(
                to_move=self.state.to_move,
                past_depth=self.history.past_depth,
                future_depth=self.history.future_depth,
            ),
        )

    def request_ai_move(self) -> Optional[int]:
        """Suggest a move for the player to move without playing it."""
        if self.is_game_over():
            return None
        result = ai.evaluate(self.state)
        emit_dataclass_event(
            self.telemetry_sink,
            "ai_choice",
            AIChoiceEvent(
                player=self.state.to_move,
                best_move=result.best_move,
                scores=list(result.scores),
            ),
        )
        return result.best_move

    def play_ai_move(self) -> MoveOutcome:
        pit = self.request_ai_move()
        if pit is None:
            reason = REASON_GAME_OVER if self.is_game_over() else REASON_NO_MOVES
            return self._reject(-1, reason)
        return self.play_move(pit)
