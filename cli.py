"""Terminal front end for the Pallanguzhi engine."""

from __future__ import annotations

import argparse
import time
from typing import List, Optional, TextIO

from pallanguzhi_engine import (
    PIT_COUNT,
    PITS_PER_SIDE,
    PLAYER_A,
    PLAYER_B,
    PLAYERS,
    RULESETS,
    State,
    iter_sow_frames,
    number_for_pit,
    owner,
    pit_for_number,
    pretty_print,
)
from pallanguzhi_game import REJECTED, Game, MoveOutcome
from pallanguzhi_telemetry import JsonLinesSink, TelemetrySink


def print_help() -> None:
    print("Controls: 1-7 = play pit, a=computer move, u=undo, r=redo, n=new game, q=quit, h=help.")
    print("Numbering: both rows read 1-7 left-to-right as printed above and below the board.")


def read_command(prompt: str) -> str:
    while True:
        try:
            raw = input(prompt).strip().lower()
        except EOFError:
            print()
            return "q"
        if raw == "":
            print(f"Please enter a pit number 1-{PITS_PER_SIDE}, or a command.")
            continue
        return raw


def format_frame(pits: tuple[int, ...]) -> str:
    top = " ".join(f"{pits[i]:2d}" for i in range(PIT_COUNT - 1, PITS_PER_SIDE - 1, -1))
    bottom = " ".join(f"{pits[i]:2d}" for i in range(PITS_PER_SIDE))
    return f"B [{top}]  A [{bottom}]"


def show_sowing(state: State, pit: int, delay_ms: int) -> None:
    for frame in iter_sow_frames(state, pit):
        print(format_frame(frame))
        time.sleep(delay_ms / 1000.0)


def describe_outcome(outcome: MoveOutcome) -> str:
    if outcome.status == REJECTED:
        return f"Move rejected ({outcome.reason})."
    trace = outcome.trace
    if trace is None:
        return ""
    parts = [f"Player {trace.mover} sowed pit {number_for_pit(trace.picked_index)}"]
    if trace.relays:
        parts.append(f"{len(trace.relays)} relay(s)")
    parts.append(f"landed on {owner(trace.landing)} pit {number_for_pit(trace.landing)}")
    if trace.capture is not None:
        parts.append(f"captured {trace.capture.captured_count}")
    return ", ".join(parts) + "."


def describe_result(game: Game) -> str:
    captured = game.get_captured()
    result = game.get_winner()
    if result in PLAYERS:
        headline = f"Player {result} wins!"
    else:
        headline = "It's a draw!"
    return f"Game over. A {captured[PLAYER_A]} - B {captured[PLAYER_B]}. {headline}"


def _open_telemetry(path: Optional[str]) -> Optional[TelemetrySink]:
    if not path:
        return None
    stream: TextIO = open(path, "a", encoding="utf-8")
    return JsonLinesSink(stream, close_stream=True)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Pallanguzhi two-player CLI")
    parser.add_argument("--seeds", type=int, default=5, help="starting seeds per pit (default: 5)")
    parser.add_argument("--rules", choices=RULESETS, default=RULESETS[0], help="ruleset (default: classic)")
    parser.add_argument("--first", choices=PLAYERS, default=PLAYER_A, help="player to move first (default: A)")
    parser.add_argument(
        "--ai",
        choices=("none",) + PLAYERS,
        default="none",
        help="side played by the computer (default: none)",
    )
    parser.add_argument("--hint", action="store_true", help="show the computer's suggestion each turn")
    parser.add_argument(
        "--animate-ms",
        type=int,
        default=0,
        help="print each sowing step with this delay in milliseconds (default: 0, off)",
    )
    parser.add_argument("--telemetry-log", default=None, help="append JSON-lines game events to this file")
    args = parser.parse_args(argv)

    if args.seeds < 0:
        print("--seeds must be non-negative")
        return 2
    if args.animate_ms < 0:
        print("--animate-ms must be non-negative")
        return 2

    sink = _open_telemetry(args.telemetry_log)
    try:
        game = Game(args.seeds, args.first, args.rules, telemetry_sink=sink)
        return _run(game, args)
    finally:
        if sink is not None:
            sink.close()


def _play(game: Game, pit: int, animate_ms: int) -> MoveOutcome:
    before = game.state
    outcome = game.play_move(pit)
    if animate_ms > 0 and outcome.accepted:
        show_sowing(before, pit, animate_ms)
    message = describe_outcome(outcome)
    if message:
        print(message)
    return outcome


def _run(game: Game, args: argparse.Namespace) -> int:
    ai_side = None if args.ai == "none" else args.ai

    while True:
        print()
        print(pretty_print(game.state))

        if game.is_game_over():
            print()
            print(describe_result(game))
            raw = read_command("New game (n) or quit (q), u=undo: ")
            if raw in {"n", "new"}:
                game.new_game(game.state.seeds_per_pit, args.first, game.state.ruleset)
            elif raw in {"u", "undo"}:
                game.undo()
            else:
                return 0
            continue

        player = game.get_active_player()
        if player == ai_side:
            pit = game.request_ai_move()
            if pit is None:
                print("No legal moves.")
                return 0
            print(f"Computer (Player {player}) plays pit {number_for_pit(pit)}.")
            _play(game, pit, args.animate_ms)
            continue

        if args.hint:
            suggestion = game.request_ai_move()
            if suggestion is not None:
                print(f"Hint: pit {number_for_pit(suggestion)}")

        raw = read_command(f"Player {player} move (1-{PITS_PER_SIDE}, h=help): ")

        if raw in {"q", "quit"}:
            return 0
        if raw in {"h", "help"}:
            print_help()
            continue
        if raw in {"u", "undo"}:
            if not game.undo():
                print("Nothing to undo.")
            continue
        if raw in {"r", "redo"}:
            if not game.redo():
                print("Nothing to redo.")
            continue
        if raw in {"n", "new"}:
            game.new_game(game.state.seeds_per_pit, args.first, game.state.ruleset)
            continue
        if raw in {"a", "ai"}:
            pit = game.request_ai_move()
            if pit is not None:
                _play(game, pit, args.animate_ms)
            continue

        if not raw.isdigit() or not 1 <= int(raw) <= PITS_PER_SIDE:
            print(f"Please enter a pit number 1-{PITS_PER_SIDE}, or a command.")
            continue

        _play(game, pit_for_number(player, int(raw)), args.animate_ms)


if __name__ == "__main__":
    raise SystemExit(main())
