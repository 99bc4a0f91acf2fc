from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from school_attendance.core.exceptions import MalformedToken
from school_attendance.tokens.qr_image import render_token_png
from school_attendance.tokens.service import SignedTokenService

ISSUED = datetime(2025, 3, 3, 7, 0, tzinfo=timezone.utc)


@pytest.fixture
def tokens():
    return SignedTokenService()


def test_issued_token_verifies(tokens):
    token = tokens.issue("S1", "student", "JSS1A", now=ISSUED)

    assert token.issued_at_ms == 1740985200000
    assert len(token.signature) == 64
    assert tokens.verify(token)


def test_changing_any_field_breaks_the_signature(tokens):
    token = tokens.issue("S1", "student", "JSS1A", now=ISSUED)

    assert not tokens.verify(replace(token, subject_id="S2"))
    assert not tokens.verify(replace(token, role="admin"))
    assert not tokens.verify(replace(token, group_id="JSS3C"))
    assert not tokens.verify(replace(token, issued_at_ms=token.issued_at_ms + 1))


def test_wire_payload_parses_back(tokens):
    token = tokens.issue("S1", "student", "JSS1A", now=ISSUED)
    payload = json.loads(token.to_json())

    assert set(payload) == {"userId", "role", "classId", "ts", "sig"}
    assert tokens.parse(token.to_json().encode()) == token


def test_class_id_is_optional(tokens):
    token = tokens.issue("T1", "teacher", now=ISSUED)

    assert "classId" not in token.to_payload()
    parsed = tokens.parse({**token.to_payload(), "classId": ""})
    assert parsed.group_id is None
    assert tokens.verify(parsed)


def test_uppercase_signature_is_accepted(tokens):
    token = tokens.issue("S1", "student", now=ISSUED)
    parsed = tokens.parse({**token.to_payload(), "sig": token.signature.upper()})

    assert tokens.verify(parsed)


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        b"\xff\xfe",
        {"role": "student", "ts": 1, "sig": "a" * 64},
        {"userId": "S1", "ts": 1, "sig": "a" * 64},
        {"userId": "S1", "role": "student", "ts": "1", "sig": "a" * 64},
        {"userId": "S1", "role": "student", "ts": True, "sig": "a" * 64},
        {"userId": "S1", "role": "student", "ts": 1.5, "sig": "a" * 64},
        {"userId": "S1", "role": "student", "ts": 1, "sig": "xyz"},
        {"userId": "S1", "role": "student", "classId": 7, "ts": 1, "sig": "a" * 64},
    ],
)
def test_malformed_payloads(tokens, raw):
    with pytest.raises(MalformedToken):
        tokens.parse(raw)


def test_wrong_signature_parses_but_does_not_verify(tokens):
    parsed = tokens.parse({"userId": "S1", "role": "student", "ts": 1, "sig": "0" * 64})

    assert not tokens.verify(parsed)


def test_freshness_window(tokens):
    token = tokens.issue("S1", "student", now=ISSUED)
    max_age = timedelta(minutes=10)

    assert tokens.is_fresh(token, now=ISSUED + timedelta(days=365), max_age=None)
    assert tokens.is_fresh(token, now=ISSUED + timedelta(minutes=9), max_age=max_age)
    assert tokens.is_fresh(token, now=ISSUED - timedelta(minutes=2), max_age=max_age)
    assert not tokens.is_fresh(token, now=ISSUED + timedelta(minutes=11), max_age=max_age)
    assert not tokens.is_fresh(token, now=ISSUED - timedelta(minutes=6), max_age=max_age)


def test_qr_image_is_png(tokens):
    png = render_token_png(tokens.issue("S1", "student", "JSS1A", now=ISSUED))

    assert png.startswith(b"\x89PNG\r\n\x1a\n")


def test_timestamp_beyond_datetime_range_is_malformed(tokens):
    ts = 10**20
    sig = SignedTokenService._digest(f"S1|student||{ts}")

    with pytest.raises(MalformedToken):
        tokens.parse({"userId": "S1", "role": "student", "ts": ts, "sig": sig})
    with pytest.raises(MalformedToken):
        tokens.parse({"userId": "S1", "role": "student", "ts": -1, "sig": sig})


def test_unrepresentable_timestamp_is_not_fresh(tokens):
    token = replace(tokens.issue("S1", "student", now=ISSUED), issued_at_ms=10**20)

    assert tokens.is_fresh(token, now=ISSUED, max_age=timedelta(minutes=10)) is False


def test_non_ascii_signature_fails_verification(tokens):
    token = tokens.issue("S1", "student", now=ISSUED)

    assert tokens.verify(replace(token, signature="é" * 64)) is False
