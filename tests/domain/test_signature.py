"""Tests for domain/signature.py — Slack request verification."""

import pytest

from banana_bot.domain.signature import sign_slack_request, verify_slack_signature

SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
NOW = 1_700_000_000
BODY = '{"type":"event_callback","event":{"type":"message","text":"hi"}}'


def _signed(ts: int = NOW, body: str = BODY, secret: str = SECRET):
    return str(ts), sign_slack_request(secret, str(ts), body)


class TestSignSlackRequest:
    def test_format(self):
        sig = sign_slack_request(SECRET, "1", "body")
        assert sig.startswith("v0=")
        assert len(sig) == 3 + 64

    def test_bytes_and_str_bodies_match(self):
        assert sign_slack_request(SECRET, "1", "body") == sign_slack_request(SECRET, "1", b"body")

    def test_known_vector(self):
        # Example from Slack's request verification docs
        body = (
            "token=xyzz0WbapA4vBCDEFasx0q6G&team_id=T1DC2JH3J&team_domain=testteamnow"
            "&channel_id=G8PSS9T3V&channel_name=foobar&user_id=U2CERLKJA&user_name=roadrunner"
            "&command=%2Fwebhook-collect&text=&response_url=https%3A%2F%2Fhooks.slack.com"
            "%2Fcommands%2FT1DC2JH3J%2F397700885554%2F96rGlfmibIGlgcZRskXaIFfN"
            "&trigger_id=398738663015.47445629121.803a0bc887a14d10d2c447fce8b6703c"
        )
        sig = sign_slack_request(SECRET, "1531420618", body)
        assert sig == "v0=a2114d57b48eac39b9ad189dd8316235a7b4a8d21a10bd27519666489c69b503"


class TestVerifySlackSignature:
    def test_valid(self):
        ts, sig = _signed()
        assert verify_slack_signature(SECRET, ts, sig, BODY, now=NOW) is True

    def test_valid_with_bytes_body(self):
        ts, sig = _signed()
        assert verify_slack_signature(SECRET, ts, sig, BODY.encode(), now=NOW) is True

    def test_valid_at_window_edge(self):
        ts, sig = _signed(ts=NOW - 300)
        assert verify_slack_signature(SECRET, ts, sig, BODY, now=NOW) is True

    def test_stale_timestamp(self):
        ts, sig = _signed(ts=NOW - 301)
        assert verify_slack_signature(SECRET, ts, sig, BODY, now=NOW) is False

    def test_future_timestamp(self):
        ts, sig = _signed(ts=NOW + 301)
        assert verify_slack_signature(SECRET, ts, sig, BODY, now=NOW) is False

    def test_custom_max_age(self):
        ts, sig = _signed(ts=NOW - 100)
        assert verify_slack_signature(SECRET, ts, sig, BODY, now=NOW, max_age=60) is False

    def test_tampered_body(self):
        ts, sig = _signed()
        tampered = BODY.replace("hi", "ho")
        assert verify_slack_signature(SECRET, ts, sig, tampered, now=NOW) is False

    def test_tampered_signature(self):
        ts, sig = _signed()
        flipped = sig[:-1] + ("0" if sig[-1] != "0" else "1")
        assert verify_slack_signature(SECRET, ts, flipped, BODY, now=NOW) is False

    def test_tampered_timestamp(self):
        ts, sig = _signed()
        assert verify_slack_signature(SECRET, str(NOW - 1), sig, BODY, now=NOW) is False

    def test_wrong_secret(self):
        ts, sig = _signed(secret="other-secret")
        assert verify_slack_signature(SECRET, ts, sig, BODY, now=NOW) is False

    def test_length_mismatch(self):
        ts, sig = _signed()
        assert verify_slack_signature(SECRET, ts, sig + "00", BODY, now=NOW) is False

    @pytest.mark.parametrize("ts, sig", [
        (None, "v0=abc"),
        ("", "v0=abc"),
        (str(NOW), None),
        (str(NOW), ""),
    ])
    def test_missing_headers(self, ts, sig):
        assert verify_slack_signature(SECRET, ts, sig, BODY, now=NOW) is False

    @pytest.mark.parametrize("ts", ["abc", "17000.5", "0x10"])
    def test_non_integer_timestamp(self, ts):
        sig = sign_slack_request(SECRET, ts, BODY)
        assert verify_slack_signature(SECRET, ts, sig, BODY, now=NOW) is False

    def test_empty_secret(self):
        ts, sig = _signed(secret="")
        assert verify_slack_signature("", ts, sig, BODY, now=NOW) is False

    def test_undecodable_body_fails_closed(self):
        ts, sig = _signed()
        assert verify_slack_signature(SECRET, ts, sig, b"\xff\xfe", now=NOW) is False

    def test_uses_wall_clock_by_default(self):
        import time

        ts = str(int(time.time()))
        sig = sign_slack_request(SECRET, ts, BODY)
        assert verify_slack_signature(SECRET, ts, sig, BODY) is True
