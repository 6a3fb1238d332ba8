"""Tests for log token redaction."""

import logging

from bk_accounter.logging_utils import REDACTED, TokenRedactionFilter


def make_record(msg, args=()):
    return logging.LogRecord("test", logging.DEBUG, __file__, 1, msg, args, None)


def test_redacts_message():
    record = make_record("Authorization: Bearer secret-token")

    assert TokenRedactionFilter("secret-token").filter(record)
    assert record.getMessage() == f"Authorization: Bearer {REDACTED}"


def test_redacts_args():
    record = make_record("headers=%s count=%d", ("Bearer secret-token", 3))

    TokenRedactionFilter("secret-token").filter(record)

    assert record.getMessage() == f"headers=Bearer {REDACTED} count=3"


def test_empty_token_leaves_record_alone():
    record = make_record("nothing %s", ("here",))

    TokenRedactionFilter("").filter(record)

    assert record.getMessage() == "nothing here"
