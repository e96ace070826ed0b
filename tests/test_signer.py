"""Tests for request signing."""

import hashlib
import json

from dangbei_proxy.core.signer import (
    NONCE_ALPHABET,
    build_envelope,
    nanoid,
    serialize_payload,
    sign,
)
from dangbei_proxy.core.upstream import UpstreamSettings, upstream_headers


class TestSign:
    """Tests for the signature function."""

    def test_matches_md5_of_concatenation(self):
        payload = {"botCode": "AI_SEARCH"}
        expected = hashlib.md5(
            b'1700000000{"botCode":"AI_SEARCH"}abc'
        ).hexdigest().upper()
        assert sign("1700000000", payload, "abc") == expected

    def test_is_uppercase_hex(self):
        signature = sign("1", {"a": 1}, "n")
        assert len(signature) == 32
        assert signature == signature.upper()
        int(signature, 16)

    def test_stable_for_same_inputs(self):
        payload = {"question": "hi", "model": "deepseek"}
        assert sign("1", payload, "n") == sign("1", dict(payload), "n")

    def test_changes_when_any_input_changes(self):
        base = sign("1", {"q": "hi"}, "n")
        assert sign("2", {"q": "hi"}, "n") != base
        assert sign("1", {"q": "ho"}, "n") != base
        assert sign("1", {"q": "hi"}, "m") != base

    def test_key_order_is_preserved_not_sorted(self):
        assert sign("1", {"b": 1, "a": 2}, "n") != sign("1", {"a": 2, "b": 1}, "n")


class TestSerializePayload:
    def test_compact_and_unescaped(self):
        assert serialize_payload({"q": "你好", "n": 1}) == '{"q":"你好","n":1}'


class TestNanoid:
    def test_default_length_and_alphabet(self):
        nonce = nanoid()
        assert len(nonce) == 21
        assert all(ch in NONCE_ALPHABET for ch in nonce)

    def test_reverses_bytes_before_mapping(self, monkeypatch):
        monkeypatch.setattr(
            "dangbei_proxy.core.signer.secrets.token_bytes", lambda size: bytes([0, 1, 64 + 2])
        )
        # 66 & 63 == 2 -> "e", 1 -> "s", 0 -> "u"
        assert nanoid(3) == "esu"


class TestBuildEnvelope:
    def test_body_is_exactly_the_signed_json(self):
        payload = {"stream": True, "question": "[Question]\n你好"}
        envelope = build_envelope(payload, timestamp="1700000000", nonce="nonce")
        assert envelope.body == serialize_payload(payload).encode("utf-8")
        assert json.loads(envelope.body) == payload
        assert envelope.signature == sign("1700000000", payload, "nonce")

    def test_generates_timestamp_and_nonce(self):
        envelope = build_envelope({"botCode": "AI_SEARCH"})
        assert envelope.timestamp.isdigit()
        assert len(envelope.nonce) == 21

    def test_headers_carry_signature_fields(self):
        envelope = build_envelope({"a": 1}, timestamp="1", nonce="n")
        headers = upstream_headers(UpstreamSettings(), "device-1", envelope)
        assert headers["deviceId"] == "device-1"
        assert headers["nonce"] == "n"
        assert headers["timestamp"] == "1"
        assert headers["sign"] == envelope.signature
        assert headers["Content-Type"] == "application/json"
        assert headers["Origin"] == "https://ai.dangbei.com"
