"""Tests for auth token encoding and adversarial parsing."""

import base64
import random

import pytest

from nearauth.token import TOKEN_SCHEMA, TokenRecord, encode_token, parse_auth_token
from nearauth.errors import ParseError

from conftest import nonce_at


def _record(**overrides) -> TokenRecord:
    fields = {
        "account_id": "alice.near",
        "public_key": "ed25519:8hSHprDq2StXwMtNd43wDTXQYsjXcD4MJTXQYsjXcc",
        "signature": bytes(range(64)),
        "message": "login attempt",
        "nonce": nonce_at(1_700_000_000_000, bytes(range(16))),
        "recipient": "app.near",
        "callback_url": None,
        "state": None,
    }
    fields.update(overrides)
    return TokenRecord(**fields)


def _raw(token: str) -> bytes:
    return base64.b64decode(token)


def _wrap(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


class TestEncodeToken:
    def test_round_trip(self):
        record = _record(callback_url="https://app.example/cb", state="csrf-123")
        assert parse_auth_token(encode_token(record)) == record

    def test_round_trip_without_optionals(self):
        record = _record()
        parsed = parse_auth_token(encode_token(record))
        assert parsed.callback_url is None
        assert parsed.state is None

    def test_empty_state_is_kept_distinct(self):
        parsed = parse_auth_token(encode_token(_record(state="")))
        assert parsed.state == ""

    def test_standard_base64(self):
        token = encode_token(_record())
        assert "-" not in token and "_" not in token

    def test_deterministic(self):
        assert encode_token(_record()) == encode_token(_record())

    def test_signed_payload_uses_token_fields(self):
        record = _record(callback_url="cb")
        payload = record.signed_payload()
        assert payload.message == record.message
        assert payload.nonce == record.nonce
        assert payload.recipient == record.recipient
        assert payload.callback_url == "cb"


class TestParseAuthTokenErrors:
    def test_invalid_base64_characters(self):
        with pytest.raises(ParseError, match="not valid base64"):
            parse_auth_token("not base64!!")

    def test_url_safe_base64_rejected(self):
        with pytest.raises(ParseError, match="URL-safe"):
            parse_auth_token("ab-_")

    def test_bad_padding(self):
        with pytest.raises(ParseError, match="base64 decode failed"):
            parse_auth_token("abc")

    def test_empty_token(self):
        with pytest.raises(ParseError, match="empty"):
            parse_auth_token("")

    def test_non_string(self):
        with pytest.raises(ParseError, match="must be a string"):
            parse_auth_token(None)

    def test_truncated(self):
        raw = _raw(encode_token(_record()))
        with pytest.raises(ParseError, match="Borsh deserialization failed"):
            parse_auth_token(_wrap(raw[:-10]))

    def test_trailing_bytes(self):
        raw = _raw(encode_token(_record()))
        with pytest.raises(ParseError, match="non-canonical"):
            parse_auth_token(_wrap(raw + b"\x00"))

    def test_invalid_option_tag(self):
        raw = bytearray(_raw(encode_token(_record())))
        assert raw[-1] == 0  # state: None
        raw[-1] = 2
        with pytest.raises(ParseError):
            parse_auth_token(_wrap(bytes(raw)))

    def test_invalid_utf8(self):
        raw = bytearray(_raw(encode_token(_record(account_id="ab"))))
        raw[4:6] = b"\xff\xfe"
        with pytest.raises(ParseError, match="Borsh deserialization failed"):
            parse_auth_token(_wrap(bytes(raw)))

    def test_undecodable_signature_field(self):
        raw = TOKEN_SCHEMA.build(
            {
                "account_id": "alice.near",
                "public_key": "ed25519:x",
                "signature": "not base64!",
                "message": "m",
                "nonce": [0] * 32,
                "recipient": "r",
                "callback_url": None,
                "state": None,
            }
        )
        with pytest.raises(ParseError, match="signature"):
            parse_auth_token(_wrap(raw))

    def test_short_signature(self):
        token = encode_token(_record(signature=bytes(63)))
        with pytest.raises(ParseError, match="64 bytes"):
            parse_auth_token(token)

    def test_non_canonical_base64(self):
        # "QR==" and "QQ==" both decode to b"A"; only the latter is canonical.
        with pytest.raises(ParseError, match="canonical"):
            parse_auth_token("QR==")

    def test_random_input_never_escapes_as_other_errors(self):
        rng = random.Random(413)
        for _ in range(300):
            raw = bytes(rng.randrange(256) for _ in range(rng.randrange(1, 200)))
            try:
                parse_auth_token(_wrap(raw))
            except ParseError:
                pass

    def test_bit_flips_are_rejected_or_change_the_record(self):
        record = _record(callback_url="https://app.example/cb", state="s")
        raw = _raw(encode_token(record))
        for index in range(len(raw)):
            flipped = bytearray(raw)
            flipped[index] ^= 0x01
            try:
                parsed = parse_auth_token(_wrap(bytes(flipped)))
            except ParseError:
                continue
            assert parsed != record
