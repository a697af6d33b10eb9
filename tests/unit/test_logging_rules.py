"""Log processors."""

from conquest.middleware.logging import redact_credentials


def test_credentials_are_masked():
    event = redact_credentials(
        None, "info", {"event": "admission_rejected", "session_id": "abcdef-123", "password": "hunter2", "user_id": 7}
    )
    assert event["session_id"] == "abcd***"
    assert event["password"] == "hunt***"
    assert event["user_id"] == 7


def test_missing_values_untouched():
    event = redact_credentials(None, "info", {"event": "admission_rejected", "session_id": None})
    assert event["session_id"] is None
