"""Core rules engine for Pallanguzhi (2x7 circular board, relay sowing)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

PLAYER_A = "A"
PLAYER_B = "B"
PLAYERS = (PLAYER_A, PLAYER_B)
DRAW = "draw"

CLASSIC = "classic"
SOUTHERN = "southern"
RULESETS = (CLASSIC, SOUTHERN)

PIT_COUNT = 14
PITS_PER_SIDE = 7
DEFAULT_SEEDS = 5

STEP_PICK = "pick"
STEP_DROP = "drop"


class EngineError(Exception):
    """Base class for conditions the engine reports instead of applying."""


class IllegalMoveError(EngineError, ValueError):
    """Raised when a pit cannot be played from the given position."""


class NoLegalMoveError(EngineError):
    """Raised when the queried player has no non-empty pit."""


class EmptyHistoryError(EngineError):
    """Raised when undo or redo has nothing to step to."""


@dataclass(frozen=True)
class State:
    to_move: str
    pits: Tuple[int, ...]
    captured_a: int
    captured_b: int
    ruleset: str = CLASSIC
    seeds_per_pit: int = DEFAULT_SEEDS

    def captured(self, player: str) -> int:
        return self.captured_a if player == PLAYER_A else self.captured_b


@dataclass(frozen=True)
class CaptureInfo:
    player: str
    landing_index: int
    opposite_index: int
    captured_count: int


@dataclass(frozen=True)
class SowResult:
    landing: int
    picked_count: int
    drops: Tuple[int, ...]
    relays: Tuple[int, ...]


@dataclass(frozen=True)
class MoveTrace:
    mover: str
    picked_index: int
    picked_count: int
    drops: Tuple[int, ...]
    relays: Tuple[int, ...]
    landing: int
    capture: Optional[CaptureInfo]
    terminal_after: bool
    sweep_a: int
    sweep_b: int


@dataclass(frozen=True)
class MoveInfo:
    state: State
    capture: bool
    trace: MoveTrace


def initial_state(
    seeds: int = DEFAULT_SEEDS,
    first: str = PLAYER_A,
    ruleset: str = CLASSIC,
) -> State:
    if seeds < 0:
        raise ValueError("seeds must be non-negative")
    if first not in PLAYERS:
        raise ValueError(f"first player must be one of {PLAYERS}")
    if ruleset not in RULESETS:
        raise ValueError(f"ruleset must be one of {RULESETS}")
    return State(first, (seeds,) * PIT_COUNT, 0, 0, ruleset, seeds)


def owner(pit: int) -> str:
    if pit < 0 or pit >= PIT_COUNT:
        raise ValueError(f"pit index must be 0..{PIT_COUNT - 1}")
    return PLAYER_A if pit < PITS_PER_SIDE else PLAYER_B


def opposite(pit: int) -> int:
    return PIT_COUNT - 1 - pit


def other_player(player: str) -> str:
    return PLAYER_B if player == PLAYER_A else PLAYER_A


def side_range(player: str) -> range:
    start = 0 if player == PLAYER_A else PITS_PER_SIDE
    return range(start, start + PITS_PER_SIDE)


def side_total(pits: Sequence[int], player: str) -> int:
    return sum(pits[i] for i in side_range(player))


def total_seeds(state: State) -> int:
    return sum(state.pits) + state.captured_a + state.captured_b


def is_legal(state: State, pit: int, player: Optional[str] = None) -> bool:
    player = player or state.to_move
    if pit < 0 or pit >= PIT_COUNT:
        return False
    return owner(pit) == player and state.pits[pit] > 0


def legal_moves(state: State, player: Optional[str] = None) -> List[int]:
    player = player or state.to_move
    return [i for i in side_range(player) if state.pits[i] > 0]


def _any_side_empty(pits: Sequence[int]) -> bool:
    return side_total(pits, PLAYER_A) == 0 or side_total(pits, PLAYER_B) == 0


def is_terminal(state: State) -> bool:
    return _any_side_empty(state.pits)


def winner(state: State) -> Optional[str]:
    """Return ``"A"``, ``"B"`` or ``"draw"`` for a finished game, else None."""
    if not is_terminal(state):
        return None
    if state.captured_a > state.captured_b:
        return PLAYER_A
    if state.captured_b > state.captured_a:
        return PLAYER_B
    return DRAW


def _sow_steps(pits: List[int], start: int) -> Iterator[Tuple[str, int]]:
    """
    Sow from ``start`` in place, yielding ``(kind, index)`` after every change.

    The hand is sown one seed per pit. When it runs out in a pit that now
    holds more than one seed, that pit is emptied into the hand and sowing
    continues (relay). Sowing ends in a pit that was empty before the last
    deposit; that pit is the final ``drop``.

    Some boards relay around the circle forever. The board and position at a
    relay pickup fix everything that follows, so a repeat of that pair raises
    ``IllegalMoveError``; ``pits`` is left part-sown in that case.
    """
    hand = pits[start]
    pits[start] = 0
    pos = start
    seen: Set[Tuple[Tuple[int, ...], int]] = set()
    yield STEP_PICK, pos
    while True:
        while hand > 0:
            pos = (pos + 1) % PIT_COUNT
            pits[pos] += 1
            hand -= 1
            yield STEP_DROP, pos
        if pits[pos] > 1:
            key = (tuple(pits), pos)
            if key in seen:
                raise IllegalMoveError(f"illegal move: pit {start} relays endlessly")
            seen.add(key)
            hand = pits[pos]
            pits[pos] = 0
            yield STEP_PICK, pos
            continue
        return


def _check_sowable(pits: Sequence[int], start: int) -> None:
    if start < 0 or start >= PIT_COUNT:
        raise IllegalMoveError(f"illegal move: pit index must be 0..{PIT_COUNT - 1}")
    if pits[start] == 0:
        raise IllegalMoveError(f"illegal move: pit {start} is empty")


def sow(pits: List[int], start: int, record: bool = False) -> SowResult:
    _check_sowable(pits, start)
    picked_count = pits[start]
    drops: List[int] = []
    relays: List[int] = []
    landing = start
    for kind, pos in _sow_steps(pits, start):
        if kind == STEP_DROP:
            landing = pos
            if record:
                drops.append(pos)
        elif record and drops:
            # Every pickup after the first one is a relay.
            relays.append(pos)
    return SowResult(landing, picked_count, tuple(drops), tuple(relays))


def iter_sow_frames(state: State, start: int) -> Iterator[Tuple[int, ...]]:
    """Yield the board after each pickup and deposit of a sow from ``start``.

    The live state is never touched; calling again restarts from ``state``.
    The last frame is the board before capture and sweep are applied.
    """
    pits = list(state.pits)
    _check_sowable(pits, start)
    for _ in _sow_steps(pits, start):
        yield tuple(pits)


def evaluate_capture(pits: List[int], landing: int, player: str, ruleset: str) -> Optional[CaptureInfo]:
    if ruleset != CLASSIC:
        return None
    if owner(landing) != player or pits[landing] != 1:
        return None
    opp_i = opposite(landing)
    captured = pits[opp_i]
    pits[opp_i] = 0
    return CaptureInfo(player, landing, opp_i, captured)


def sweep(pits: List[int]) -> Tuple[int, int]:
    """Clear the side still holding seeds; returns ``(sweep_a, sweep_b)``."""
    rem_a = side_total(pits, PLAYER_A)
    rem_b = side_total(pits, PLAYER_B)
    assert rem_a == 0 or rem_b == 0, "sweep requires at least one empty side"
    if rem_a > 0:
        for i in side_range(PLAYER_A):
            pits[i] = 0
        return rem_a, 0
    if rem_b > 0:
        for i in side_range(PLAYER_B):
            pits[i] = 0
        return 0, rem_b
    return 0, 0


def apply_move(state: State, pit: int) -> State:
    return _apply_move(state, pit, False).state


def apply_move_with_info(state: State, pit: int) -> MoveInfo:
    return _apply_move(state, pit, True)


def _apply_move(state: State, pit: int, record: bool) -> MoveInfo:
    if pit < 0 or pit >= PIT_COUNT:
        raise IllegalMoveError(f"illegal move: pit index must be 0..{PIT_COUNT - 1}")
    mover = state.to_move
    if owner(pit) != mover:
        raise IllegalMoveError(f"illegal move: pit {pit} belongs to player {owner(pit)}")

    pits = list(state.pits)
    captured: Dict[str, int] = {PLAYER_A: state.captured_a, PLAYER_B: state.captured_b}

    sown = sow(pits, pit, record)
    capture = evaluate_capture(pits, sown.landing, mover, state.ruleset)
    if capture is not None:
        captured[mover] += capture.captured_count

    sweep_a = 0
    sweep_b = 0
    terminal_after = _any_side_empty(pits)
    if terminal_after:
        sweep_a, sweep_b = sweep(pits)
        captured[PLAYER_A] += sweep_a
        captured[PLAYER_B] += sweep_b

    next_to_move = mover if terminal_after else other_player(mover)
    new_state = State(
        next_to_move,
        tuple(pits),
        captured[PLAYER_A],
        captured[PLAYER_B],
        state.ruleset,
        state.seeds_per_pit,
    )
    trace = MoveTrace(
        mover=mover,
        picked_index=pit,
        picked_count=sown.picked_count,
        drops=sown.drops,
        relays=sown.relays,
        landing=sown.landing,
        capture=capture,
        terminal_after=terminal_after,
        sweep_a=sweep_a,
        sweep_b=sweep_b,
    )
    return MoveInfo(new_state, capture is not None, trace)


def pit_for_number(player: str, number: int) -> int:
    """Map a player-relative pit number 1..7 to a board index.

    Player A counts 0..6 left-to-right along the bottom row; player B counts
    13..7 along the top row, which is drawn right-to-left.
    """
    if number < 1 or number > PITS_PER_SIDE:
        raise ValueError(f"pit number must be 1..{PITS_PER_SIDE}")
    if player == PLAYER_A:
        return number - 1
    return PIT_COUNT - number


def number_for_pit(pit: int) -> int:
    if owner(pit) == PLAYER_A:
        return pit + 1
    return PIT_COUNT - pit


def pretty_print(state: State) -> str:
    """
    Text board with B's row on top (indices 13..7) and A's row below (0..6).

    Both rows read pit 1..7 left-to-right, so the numbers printed above and
    below are what each player types.
    """
    max_val = max(state.captured_a, state.captured_b, *state.pits)
    digits = max(2, len(str(max_val)))
    pit_inner = digits + 2

    def pit_cell(n: int) -> str:
        return f" {n:0{digits}d} "

    nums = " ".join(f"{i:^{pit_inner}d}" for i in range(1, PITS_PER_SIDE + 1))
    border = "+" + "+".join(["-" * pit_inner] * PITS_PER_SIDE) + "+"
    row_b = "|" + "|".join(pit_cell(state.pits[i]) for i in range(PIT_COUNT - 1, PITS_PER_SIDE - 1, -1)) + "|"
    row_a = "|" + "|".join(pit_cell(state.pits[i]) for i in range(PITS_PER_SIDE)) + "|"

    indent = "    "
    width = len(border)
    if is_terminal(state):
        status = "Game over"
    else:
        status = f"Turn: Player {state.to_move}"

    lines = [
        f"{status} | Rules: {state.ruleset}",
        "",
        indent + "PLAYER B".center(width),
        f"{indent} {nums}",
        indent + border,
        f" B  {row_b}",
        f" A  {row_a}",
        indent + border,
        f"{indent} {nums}",
        indent + "PLAYER A".center(width),
        "",
        f"Captured: A {state.captured_a} | B {state.captured_b}",
    ]
    return "\n".join(lines)
