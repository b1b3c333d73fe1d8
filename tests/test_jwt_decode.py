from __future__ import annotations

import base64
import json

import pytest

from opskit_cli.jwt_decode import (
    DecodeError,
    FormatError,
    ParseError,
    b64url_decode_raw,
    decode_token,
    format_payload,
    split_token,
)


def _b64url(obj) -> str:
    raw = json.dumps(obj, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _token(header, payload, signature: str = "sig") -> str:
    return f"{_b64url(header)}.{_b64url(payload)}.{signature}"


def test_decode_token_returns_header_payload_and_raw_signature():
    decoded = decode_token(_token({"alg": "none"}, {"sub": "123"}, "abc-_"))
    assert decoded.header == {"alg": "none"}
    assert decoded.payload == {"sub": "123"}
    assert decoded.signature == "abc-_"


def test_signature_is_never_interpreted():
    decoded = decode_token(_token({"alg": "HS256"}, {"a": 1}, "!!not base64!!"))
    assert decoded.payload == {"a": 1}


@pytest.mark.parametrize("token,count", [("a.b", 2), ("a.b.c.d", 4), ("abc", 1), ("", 1)])
def test_split_token_rejects_wrong_part_count(token: str, count: int):
    with pytest.raises(FormatError) as exc:
        split_token(token)
    assert exc.value.expected == 3
    assert exc.value.actual == count
    assert f"expected 3 parts, got {count}" in str(exc.value)


def test_malformed_header_stops_before_payload():
    token = f"%%%.{'@@@'}.sig"
    with pytest.raises(DecodeError) as exc:
        decode_token(token)
    assert exc.value.segment == "header"


def test_malformed_payload_names_payload():
    token = f"{_b64url({'alg': 'none'})}.@@@.sig"
    with pytest.raises(DecodeError) as exc:
        decode_token(token)
    assert exc.value.segment == "payload"
    assert "decoding payload" in str(exc.value)


def test_padded_segment_is_rejected():
    padded = base64.urlsafe_b64encode(b'{"a":1}').decode("ascii")
    assert padded.endswith("=")
    with pytest.raises(ValueError, match="illegal base64 data"):
        b64url_decode_raw(padded)


def test_standard_alphabet_characters_are_rejected():
    with pytest.raises(ValueError, match="input byte 2"):
        b64url_decode_raw("ab+/")


def test_impossible_length_is_rejected():
    with pytest.raises(ValueError):
        b64url_decode_raw("abcde")


def test_url_safe_characters_decode():
    raw = b"\xfb\xff\xfe"
    encoded = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
    assert "-" in encoded or "_" in encoded
    assert b64url_decode_raw(encoded) == raw


def test_header_json_failure_is_parse_error():
    bad = base64.urlsafe_b64encode(b"not json").decode("ascii").rstrip("=")
    with pytest.raises(ParseError) as exc:
        decode_token(f"{bad}.{_b64url({'sub': '1'})}.sig")
    assert exc.value.segment == "header"
    assert "parsing header JSON" in str(exc.value)


def test_payload_must_be_json_object():
    with pytest.raises(ParseError) as exc:
        decode_token(f"{_b64url({'alg': 'none'})}.{_b64url([1, 2])}.sig")
    assert exc.value.segment == "payload"
    assert "expected JSON object" in str(exc.value)


def test_payload_decode_checked_before_header_parse():
    bad_header = base64.urlsafe_b64encode(b"not json").decode("ascii").rstrip("=")
    with pytest.raises(DecodeError) as exc:
        decode_token(f"{bad_header}.@@@.sig")
    assert exc.value.segment == "payload"


def test_format_payload_preserves_token_key_order():
    out = format_payload({"z": 1, "a": {"nested": True}})
    assert out == '{\n  "z": 1,\n  "a": {\n    "nested": true\n  }\n}'


def test_format_payload_sort_keys_and_utf8():
    out = format_payload({"name": "Zoë", "aud": "x"}, sort_keys=True)
    assert out == '{\n  "aud": "x",\n  "name": "Zoë"\n}'


def test_deeply_nested_payload_is_parse_error():
    nested = base64.urlsafe_b64encode(b'{"a":' + b"[" * 100000 + b"}").decode("ascii").rstrip("=")
    with pytest.raises(ParseError) as exc:
        decode_token(f"e30.{nested}.sig")
    assert exc.value.segment == "payload"


@pytest.mark.parametrize("body", [b'{"a":NaN}', b'{"a":Infinity}', b'{"a":-Infinity}'])
def test_non_json_constants_are_parse_errors(body: bytes):
    payload = base64.urlsafe_b64encode(body).decode("ascii").rstrip("=")
    with pytest.raises(ParseError) as exc:
        decode_token(f"e30.{payload}.sig")
    assert exc.value.segment == "payload"


def test_overflowing_number_is_parse_error():
    payload = base64.urlsafe_b64encode(b'{"b":1e999}').decode("ascii").rstrip("=")
    with pytest.raises(ParseError, match="out of range"):
        decode_token(f"e30.{payload}.sig")


def test_format_payload_refuses_non_finite_numbers():
    with pytest.raises(ValueError):
        format_payload({"a": float("nan")})
