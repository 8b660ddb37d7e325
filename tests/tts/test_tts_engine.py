"""Tests for NullTTSEngine and ConsoleTTSEngine."""

from __future__ import annotations

import logging

from rde_coach.tts.engine import ConsoleTTSEngine, NullTTSEngine


def test_null_engine_records_calls():
    engine = NullTTSEngine()
    engine.speak("hello")
    engine.speak("urgent", priority=1)
    engine.stop()
    assert engine.speaks == [("hello", 0), ("urgent", 1)]
    assert engine.stops == 1
    assert not engine.is_speaking()
    engine.shutdown()


def test_console_engine_logs_utterances(caplog):
    engine = ConsoleTTSEngine()
    with caplog.at_level(logging.INFO, logger="rde_coach.tts.engine"):
        engine.speak("Your urban driving is sufficient.")
        engine.speak("The RDE test is currently invalid.", priority=1)
    assert "> Your urban driving is sufficient." in caplog.text
    assert "! The RDE test is currently invalid." in caplog.text
    assert not engine.is_speaking()


def test_console_engine_custom_logger(caplog):
    logger = logging.getLogger("rde_coach.test.console")
    engine = ConsoleTTSEngine(logger)
    with caplog.at_level(logging.INFO, logger="rde_coach.test.console"):
        engine.speak("hi")
        engine.stop()
    assert caplog.records[0].name == "rde_coach.test.console"
