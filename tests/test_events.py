"""
test_events.py
--------------

Diagnostic events and sinks: one event per iteration, logged through the
"epabc" logger by default.
"""

import logging

import jax.numpy as jnp
import pytest

from epabc import EPABCConfig, EPABCEngine, GaussianPrior
from epabc.utils import (
    DiagnosticEvent,
    EventSink,
    LoggingEventSink,
    NullEventSink,
    RecordingEventSink,
)


def test_event_properties():
    updated = DiagnosticEvent(kind="updated", index=2, accepted=30, num_simulations=300)
    assert not updated.skipped
    assert updated.acceptance_rate == pytest.approx(0.1)

    cavity = DiagnosticEvent(kind="degenerate_cavity", index=0, accepted=None, num_simulations=300)
    assert cavity.skipped
    assert cavity.acceptance_rate is None


def test_sinks_satisfy_protocol():
    for sink in (LoggingEventSink(), RecordingEventSink(), NullEventSink()):
        assert isinstance(sink, EventSink)


def test_recording_sink_clear():
    sink = RecordingEventSink()
    sink(DiagnosticEvent(kind="insufficient", index=0, accepted=1, num_simulations=10))
    assert sink.kinds() == ["insufficient"]
    sink.clear()
    assert sink.events == []


def test_logging_sink_levels(caplog):
    sink = LoggingEventSink()
    with caplog.at_level(logging.INFO, logger="epabc"):
        sink(DiagnosticEvent(kind="updated", index=1, accepted=5, num_simulations=50))
        sink(
            DiagnosticEvent(
                kind="insufficient", index=2, accepted=0, num_simulations=50, message="guard"
            )
        )
    levels = [record.levelno for record in caplog.records]
    assert levels == [logging.INFO, logging.WARNING]
    assert "iteration 1" in caplog.records[0].getMessage()
    assert "insufficient" in caplog.records[1].getMessage()
    assert all(record.name == "epabc" for record in caplog.records)


def test_engine_logs_by_default(gaussian_location_model, caplog):
    engine = EPABCEngine(
        jnp.array([0.0, 80.0]),
        gaussian_location_model(1.0),
        GaussianPrior.standard(),
        "l2",
        EPABCConfig(num_simulations=2000, tolerance=0.3),
    )
    with caplog.at_level(logging.INFO, logger="epabc"):
        engine.run_pass()
    assert len(caplog.records) == 2
    assert caplog.records[0].levelno == logging.INFO
    assert caplog.records[1].levelno == logging.WARNING


def test_engine_emits_one_event_per_iteration(gaussian_location_model):
    sink = RecordingEventSink()
    engine = EPABCEngine(
        jnp.linspace(-1.0, 1.0, 6),
        gaussian_location_model(1.0),
        GaussianPrior.standard(),
        "l2",
        EPABCConfig(num_simulations=2000, tolerance=0.5),
        event_sink=sink,
    )
    engine.run(n_passes=2)
    assert len(sink.events) == 12
    assert [e.index for e in sink.events] == list(range(6)) * 2
    assert all(e.num_simulations == 2000 for e in sink.events)
