"""Telemetry schema and sinks for Pallanguzhi game events."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from queue import Queue
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, TextIO
import json
import threading
import time


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class TelemetryEnvelope:
    event: str
    ts_ms: int
    data: Dict[str, Any]


@dataclass(frozen=True)
class GameStartEvent:
    seeds_per_pit: int
    first_player: str
    ruleset: str


@dataclass(frozen=True)
class MoveAppliedEvent:
    mover: str
    pit: int
    picked_count: int
    drops: int
    relays: int
    landing: int
    captured: Optional[int]
    terminal_after: bool
    pits: list[int]


@dataclass(frozen=True)
class MoveRejectedEvent:
    player: str
    pit: int
    reason: str


@dataclass(frozen=True)
class CaptureEvent:
    player: str
    landing_index: int
    opposite_index: int
    captured_count: int


@dataclass(frozen=True)
class GameOverEvent:
    winner: str
    captured_a: int
    captured_b: int
    sweep_a: int
    sweep_b: int


@dataclass(frozen=True)
class HistoryStepEvent:
    to_move: str
    past_depth: int
    future_depth: int


@dataclass(frozen=True)
class AIChoiceEvent:
    player: str
    best_move: Optional[int]
    scores: list[tuple[int, int]]


class TelemetrySink(Protocol):
    def emit(self, envelope: TelemetryEnvelope) -> None:
        ...

    def close(self) -> None:
        ...


class NullTelemetrySink:
    def emit(self, envelope: TelemetryEnvelope) -> None:
        _ = envelope

    def close(self) -> None:
        return


class CallbackTelemetrySink:
    def __init__(self, callback: Callable[[TelemetryEnvelope], None]) -> None:
        self._callback = callback

    def emit(self, envelope: TelemetryEnvelope) -> None:
        self._callback(envelope)

    def close(self) -> None:
        return


class QueueTelemetrySink:
    def __init__(self, queue: "Queue[TelemetryEnvelope]") -> None:
        self._queue = queue

    def emit(self, envelope: TelemetryEnvelope) -> None:
        self._queue.put(envelope)

    def close(self) -> None:
        return


class JsonLinesSink:
    """Writes one compact JSON object per event to a text stream."""

    def __init__(self, stream: TextIO, close_stream: bool = False) -> None:
        self._stream = stream
        self._close_stream = close_stream
        self._lock = threading.Lock()
        self._closed = False

    def emit(self, envelope: TelemetryEnvelope) -> None:
        payload = {
            "event": envelope.event,
            "ts_ms": envelope.ts_ms,
            "data": envelope.data,
        }
        line = json.dumps(payload, separators=(",", ":"))
        with self._lock:
            if self._closed:
                return
            self._stream.write(line + "\n")
            self._stream.flush()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._close_stream:
                self._stream.close()


def emit_event(sink: Optional[TelemetrySink], event: str, payload: Mapping[str, Any]) -> None:
    if sink is None:
        return
    envelope = TelemetryEnvelope(event=event, ts_ms=now_ms(), data=dict(payload))
    try:
        sink.emit(envelope)
    except Exception:
        return


def emit_dataclass_event(sink: Optional[TelemetrySink], event: str, payload_obj: object) -> None:
    emit_event(sink, event, asdict(payload_obj))
