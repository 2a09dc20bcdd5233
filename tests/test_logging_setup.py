import logging

from quiz_companion.logging_setup import (
    REDACTED,
    RedactingFilter,
    StructuredFormatter,
    redact,
    setup_logging,
)


def make_record(msg, args=(), **extra):
    record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_redacts_flat_payload():
    assert redact({"user": "a", "password": "p@ss"}) == {"user": "a", "password": REDACTED}


def test_redacts_nested_payloads_and_lists():
    payload = {
        "request": {
            "headers": {"Authorization": "Bearer abc", "Accept": "json"},
            "items": [{"api_key": "k1", "name": "one"}, "plain"],
        },
        "ServiceAccount": {"private_key": "-----BEGIN", "project_id": "demo"},
    }

    assert redact(payload) == {
        "request": {
            "headers": {"Authorization": REDACTED, "Accept": "json"},
            "items": [{"api_key": REDACTED, "name": "one"}, "plain"],
        },
        "ServiceAccount": {"private_key": REDACTED, "project_id": "demo"},
    }


def test_matching_is_case_insensitive_substring():
    result = redact({"X-Auth-Header": 1, "refreshTOKEN": 2, "monkey": 3, "amount": 4})
    # "monkey" contains "key"
    assert result == {"X-Auth-Header": REDACTED, "refreshTOKEN": REDACTED, "monkey": REDACTED, "amount": 4}


def test_redact_does_not_mutate_input():
    payload = {"secret": "s", "inner": {"token": "t"}}
    redact(payload)
    assert payload == {"secret": "s", "inner": {"token": "t"}}


def test_scalars_pass_through():
    assert redact("password") == "password"
    assert redact(None) is None
    assert redact(3) == 3


def test_filter_masks_mapping_args_and_extras():
    record = make_record("login %(user)s")
    record.args = {"user": "a", "password": "p@ss"}
    record.payload = {"client_secret": "x", "orderID": "O-1"}
    record.access_token = "tok"

    assert RedactingFilter().filter(record)

    assert record.args == {"user": "a", "password": REDACTED}
    assert record.payload == {"client_secret": REDACTED, "orderID": "O-1"}
    assert record.access_token == REDACTED


def test_filter_masks_dicts_inside_positional_args():
    record = make_record("body %s", ({"password": "p"},))
    RedactingFilter().filter(record)
    assert record.getMessage() == f"body {{'password': '{REDACTED}'}}"


def test_formatter_appends_extras_as_json():
    record = make_record("Incoming", payload={"user": "a"})
    RedactingFilter().filter(record)
    line = StructuredFormatter("[%(levelname)s]: %(message)s").format(record)
    assert line == '[INFO]: Incoming {"payload": {"user": "a"}}'


def test_setup_logging_writes_redacted_files(tmp_path):
    setup_logging("debug", str(tmp_path), force=True)
    logger = logging.getLogger("quiz_companion.test")
    try:
        logger.info("user payload", extra={"payload": {"user": "a", "password": "p@ss"}})
        logger.error("boom")
    finally:
        for handler in logging.getLogger().handlers:
            handler.flush()

    combined = (tmp_path / "combined.log").read_text(encoding="utf-8")
    errors = (tmp_path / "error.log").read_text(encoding="utf-8")

    assert "[INFO] quiz_companion.test: user payload" in combined
    assert "p@ss" not in combined
    assert REDACTED in combined
    assert "boom" in errors
    assert "user payload" not in errors

    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


def test_filter_masks_payload_passed_as_message():
    record = make_record({"user": "a", "password": "p@ss", "nested": {"api_token": "t"}})

    RedactingFilter().filter(record)
    line = StructuredFormatter("%(message)s").format(record)

    assert "p@ss" not in line
    assert record.msg == {"user": "a", "password": REDACTED, "nested": {"api_token": REDACTED}}


def test_filter_masks_list_message():
    record = make_record([{"secret": "s"}, "plain"])
    RedactingFilter().filter(record)
    assert record.msg == [{"secret": REDACTED}, "plain"]


def test_setup_logging_is_a_noop_once_configured(tmp_path):
    setup_logging("info", force=True)
    try:
        first = logging.getLogger().handlers[:]
        setup_logging("debug", str(tmp_path))

        assert logging.getLogger().handlers == first
        assert not (tmp_path / "combined.log").exists()
    finally:
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)
