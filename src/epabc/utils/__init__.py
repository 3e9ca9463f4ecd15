"""
utils
=====

Shared utility functions and helpers for epabc.

This subpackage provides:
- events : diagnostic event channel (logging, recording and null sinks).
- math : ABC distances (L2, L1).
- rng : PRNG key handling for reproducibility.
"""

from .events import (
    DiagnosticEvent,
    EventSink,
    LoggingEventSink,
    NullEventSink,
    RecordingEventSink,
)
from .math import l1_distance, l2_distance
from .rng import as_key, fold_in, seed, split

__all__ = [
    # events
    "DiagnosticEvent",
    "EventSink",
    "LoggingEventSink",
    "NullEventSink",
    "RecordingEventSink",
    # math
    "l1_distance",
    "l2_distance",
    # rng
    "as_key",
    "fold_in",
    "seed",
    "split",
]
