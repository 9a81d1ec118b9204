"""Tests for error handler implementations."""

from utils import CollectingErrorHandler, LoggingErrorHandler


def test_collecting_handler_records_messages() -> None:
    handler = CollectingErrorHandler()
    assert handler.messages == []
    handler.handle("first")
    handler.handle("second", ValueError("boom"))
    assert handler.messages == ["first", "second: boom"]


def test_logging_handler_emits_error(monkeypatch) -> None:
    import utils.error_handler as module

    calls: list[tuple] = []
    monkeypatch.setattr(
        module.logfire, "error", lambda *a, **k: calls.append((a, k))
    )
    LoggingErrorHandler().handle("bad file", OSError("denied"))
    assert calls[0][0] == ("bad file: denied",)
    assert calls[0][1] == {"error_type": "OSError"}
