"""
events.py
---------

Diagnostic event channel for the EP-ABC engine.

The engine never logs directly. After each iteration it hands a
DiagnosticEvent to an injectable sink, which decides what to do with it:

- LoggingEventSink : forward to the standard `logging` module (default).
- RecordingEventSink : keep events in memory (tests, notebooks).
- NullEventSink : drop everything.

Any callable taking a DiagnosticEvent satisfies the EventSink protocol.

Event kinds
-----------
- "updated" : moment matching succeeded, global and site committed.
- "insufficient" : too few accepted draws for the acceptance guard.
- "degenerate_covariance" : empirical covariance of accepted draws is not PD.
- "degenerate_cavity" : cavity natural parameters are not a proper Gaussian.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

EventKind = Literal[
    "updated", "insufficient", "degenerate_covariance", "degenerate_cavity"
]

SKIP_KINDS = ("insufficient", "degenerate_covariance", "degenerate_cavity")


@dataclass(frozen=True)
class DiagnosticEvent:
    """
    Outcome of one EP-ABC iteration.

    Attributes
    ----------
    kind : str
        One of "updated", "insufficient", "degenerate_covariance",
        "degenerate_cavity".
    index : int
        Data point index processed by the iteration.
    accepted : int | None
        Number of accepted simulations (None when no simulation was run).
    num_simulations : int
        Number of Monte Carlo draws M.
    message : str
        Human-readable detail.
    """

    kind: EventKind
    index: int
    accepted: int | None
    num_simulations: int
    message: str = ""

    @property
    def skipped(self) -> bool:
        return self.kind in SKIP_KINDS

    @property
    def acceptance_rate(self) -> float | None:
        if self.accepted is None:
            return None
        return self.accepted / self.num_simulations


@runtime_checkable
class EventSink(Protocol):
    """Anything callable with a DiagnosticEvent."""

    def __call__(self, event: DiagnosticEvent) -> None: ...


class LoggingEventSink:
    """
    Forward events to a `logging.Logger`.

    Updates are logged at INFO with the accepted fraction, skipped
    iterations at WARNING.

    Parameters
    ----------
    logger : logging.Logger | None
        Target logger. Defaults to logging.getLogger("epabc").
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("epabc")

    def __call__(self, event: DiagnosticEvent) -> None:
        rate = event.acceptance_rate
        rate_txt = "n/a" if rate is None else f"{rate:.4g}"
        if event.skipped:
            self.logger.warning(
                "iteration %d skipped (%s): accepted fraction %s. %s",
                event.index,
                event.kind,
                rate_txt,
                event.message,
            )
        else:
            self.logger.info("iteration %d: %s accepted", event.index, rate_txt)


class RecordingEventSink:
    """Collect events in `self.events`."""

    def __init__(self) -> None:
        self.events: list[DiagnosticEvent] = []

    def __call__(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]

    def clear(self) -> None:
        self.events.clear()


class NullEventSink:
    """Discard all events."""

    def __call__(self, event: DiagnosticEvent) -> None:
        return None
