"""Tests for the diagnostics channel and structured logging helpers."""

import asyncio
import logging

import pytest

from qrsvg.diagnostics import FRAME_DETECT_FAILED, Diagnostic, Diagnostics
from qrsvg.logging import AUDIT, audit, get_logger, trace


class TestDiagnostics:
    def test_report_appends_and_returns_entry(self):
        diagnostics = Diagnostics()
        entry = diagnostics.report(FRAME_DETECT_FAILED, "no hole", frame_width=10)
        assert diagnostics == [entry]
        assert entry == Diagnostic(FRAME_DETECT_FAILED, "no hole", {"frame_width": 10})
        assert str(entry) == "[frame.detect_failed] no hole"

    def test_report_is_mirrored_to_audit_log(self, caplog):
        with caplog.at_level(AUDIT, logger="qrsvg"):
            Diagnostics().report("image.adjusted", "moved", index=0)
        record = next(r for r in caplog.records if getattr(r, "event", None) == "image.adjusted")
        assert record.levelname == "AUDIT"
        assert record.ctx["index"] == 0

    def test_copy_keeps_entries(self):
        first = Diagnostics()
        first.report("shape.fallback", "x")
        assert Diagnostics(first).codes() == ["shape.fallback"]


class TestLogging:
    def test_logger_namespace(self):
        assert get_logger("renderer").name == "qrsvg.renderer"

    def test_audit_carries_context(self, caplog):
        log = get_logger("test")
        with caplog.at_level(AUDIT, logger="qrsvg"):
            audit("render.done", logger=log, size=21)
        [record] = [r for r in caplog.records if getattr(r, "event", None) == "render.done"]
        assert record.ctx == {"size": 21}

    def test_trace_times_coroutines(self, caplog):
        @trace(logger_name="test")
        async def slow():
            await asyncio.sleep(0)
            return "ok"

        with caplog.at_level(logging.DEBUG, logger="qrsvg"):
            assert asyncio.run(slow()) == "ok"
        events = [getattr(r, "event", None) for r in caplog.records]
        assert "slow.enter" in events and "slow.done" in events

    def test_trace_logs_and_reraises(self, caplog):
        @trace(logger_name="test")
        def boom():
            raise ValueError("bad")

        with caplog.at_level(logging.INFO, logger="qrsvg"), pytest.raises(ValueError, match="bad"):
            boom()
        assert any(getattr(r, "event", None) == "boom.error" for r in caplog.records)
