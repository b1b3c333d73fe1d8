"""Structural JWT decoding.

A token is split on ``.`` into header, payload and signature. The first two
segments are base64url-decoded (no padding) and parsed as JSON objects. The
signature is kept as raw text and never verified.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
import re
from dataclasses import dataclass
from typing import Any

from .cli_shared import OpError

TOKEN_PARTS = 3

_B64URL_ILLEGAL = re.compile(r"[^A-Za-z0-9_-]")


class TokenError(OpError):
    pass


class FormatError(TokenError):
    def __init__(self, actual: int, expected: int = TOKEN_PARTS) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"invalid JWT token format (expected {expected} parts, got {actual})"
        )


class DecodeError(TokenError):
    def __init__(self, segment: str, cause: str) -> None:
        self.segment = segment
        self.cause = cause
        super().__init__(f"decoding {segment}: {cause}")


class ParseError(TokenError):
    def __init__(self, segment: str, cause: str) -> None:
        self.segment = segment
        self.cause = cause
        super().__init__(f"parsing {segment} JSON: {cause}")


@dataclass(frozen=True)
class DecodedToken:
    header: dict[str, Any]
    payload: dict[str, Any]
    signature: str


def b64url_decode_raw(segment: str) -> bytes:
    """Decode unpadded base64url text, rejecting padding and foreign characters."""
    bad = _B64URL_ILLEGAL.search(segment)
    if bad is not None:
        raise ValueError(f"illegal base64 data at input byte {bad.start()}")
    if len(segment) % 4 == 1:
        raise ValueError(f"illegal base64 data at input byte {len(segment) - 1}")
    padded = segment + "=" * (-len(segment) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except binascii.Error as e:
        raise ValueError(str(e)) from e


def split_token(token: str) -> tuple[str, str, str]:
    parts = token.split(".")
    if len(parts) != TOKEN_PARTS:
        raise FormatError(len(parts))
    return parts[0], parts[1], parts[2]


def _decode_segment(segment: str, label: str) -> bytes:
    try:
        return b64url_decode_raw(segment)
    except ValueError as e:
        raise DecodeError(label, str(e)) from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON literal {name!r}")


def _finite_float(text: str) -> float:
    val = float(text)
    if not math.isfinite(val):
        raise ValueError(f"number out of range: {text}")
    return val


def _parse_segment(raw: bytes, label: str) -> dict[str, Any]:
    try:
        val = json.loads(
            raw.decode("utf-8"),
            parse_constant=_reject_constant,
            parse_float=_finite_float,
        )
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise ParseError(label, str(e)) from e
    if not isinstance(val, dict):
        raise ParseError(label, f"expected JSON object, got {type(val).__name__}")
    return val


def decode_token(token: str) -> DecodedToken:
    header_b64, payload_b64, signature = split_token(token)

    header_raw = _decode_segment(header_b64, "header")
    payload_raw = _decode_segment(payload_b64, "payload")

    header = _parse_segment(header_raw, "header")
    payload = _parse_segment(payload_raw, "payload")
    return DecodedToken(header=header, payload=payload, signature=signature)


def format_payload(payload: dict[str, Any], *, sort_keys: bool = False) -> str:
    return json.dumps(payload, indent=2, sort_keys=sort_keys, ensure_ascii=False, allow_nan=False)
