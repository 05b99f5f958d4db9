import logging

from telemetry import emit_log_event


def test_emit_log_event_logs_structured_record(caplog):
    with caplog.at_level(logging.INFO, logger="activity"):
        record = emit_log_event(
            type="user",
            action="logout",
            result="success",
            params=[None, "landing"],
            user_email="listener@example.com",
        )

    assert record == {
        "type": "user",
        "action": "logout",
        "result": "success",
        "user_id": "listener@example.com",
        "params": ["landing"],
    }
    assert caplog.records[-1].activity == record
    assert caplog.records[-1].levelno == logging.INFO


def test_failed_events_log_as_warning(caplog):
    with caplog.at_level(logging.INFO, logger="activity"):
        emit_log_event(type="narrative", action="generate", result="fail", params=["boom"])

    assert caplog.records[-1].levelno == logging.WARNING
