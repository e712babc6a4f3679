"""One-ply heuristic move selector for the automated player."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from pallanguzhi_engine import (
    IllegalMoveError,
    NoLegalMoveError,
    State,
    evaluate_capture,
    legal_moves,
    sow,
)

CAPTURE_WEIGHT = 2
CAPTURE_BONUS = 1


@dataclass(frozen=True)
class AIResult:
    best_move: Optional[int]
    score: int
    scores: List[Tuple[int, int]]


def score_move(state: State, pit: int, player: Optional[str] = None) -> int:
    """
    Score a single move by simulating it on a private copy of the board.

    A move that ends in a capture earns ``captured * 2 + 1`` (an empty
    opposite pit still counts as a capture), and every move earns the number
    of seeds it picks up.
    """
    player = player or state.to_move
    pits = list(state.pits)
    sown = sow(pits, pit)
    score = sown.picked_count
    capture = evaluate_capture(pits, sown.landing, player, state.ruleset)
    if capture is not None:
        score += capture.captured_count * CAPTURE_WEIGHT + CAPTURE_BONUS
    return score


def score_moves(state: State, player: Optional[str] = None) -> List[Tuple[int, int]]:
    """Score every legal move, leaving out moves whose sowing never ends."""
    player = player or state.to_move
    scores = []
    for pit in legal_moves(state, player):
        try:
            scores.append((pit, score_move(state, pit, player)))
        except IllegalMoveError:
            continue
    return scores


def evaluate(state: State, player: Optional[str] = None) -> AIResult:
    scores = score_moves(state, player)
    best: Optional[int] = None
    best_score = -1
    for pit, score in scores:
        # Strict comparison keeps the lowest index on ties.
        if score > best_score:
            best = pit
            best_score = score
    return AIResult(best_move=best, score=max(best_score, 0), scores=scores)


def best_move(state: State, player: Optional[str] = None) -> int:
    result = evaluate(state, player)
    if result.best_move is None:
        raise NoLegalMoveError(f"player {player or state.to_move} has no legal moves")
    return result.best_move


def choose_move(state: State, player: Optional[str] = None) -> Optional[int]:
    try:
        return best_move(state, player)
    except NoLegalMoveError:
        return None
