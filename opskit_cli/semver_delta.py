"""Carry a version bump from one release line onto another.

Given ``previous -> latest`` on one line, find the highest-order field that
moved and apply the same signed delta to ``current``. Lower-order fields of
the result are reset to zero when a higher field moved.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .cli_shared import OpError

FIELDS = ("major", "minor", "patch")

_DIGITS = re.compile(r"[0-9]+")


class SemverError(OpError):
    pass


class EmptyVersionError(SemverError):
    def __init__(self) -> None:
        super().__init__("empty version")


class InvalidFormatError(SemverError):
    def __init__(self, core: str) -> None:
        self.core = core
        super().__init__(f"invalid semver: {core!r}")


class InvalidFieldError(SemverError):
    def __init__(self, field: str, raw: str) -> None:
        self.field = field
        self.raw = raw
        super().__init__(f"invalid {field}: {raw!r} is not a non-negative integer")


class NegativeResultError(SemverError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"resulting {field} would be negative")


@dataclass(frozen=True)
class SemanticVersion:
    major: int
    minor: int
    patch: int
    has_prefix_v: bool = False

    def __str__(self) -> str:
        return format_semver(self)


def parse_semver(version: str) -> SemanticVersion:
    if not version:
        raise EmptyVersionError()
    has_prefix_v = version[0] in ("v", "V")
    core = version[1:] if has_prefix_v else version
    # Pre-release is cut before build metadata, on the already-cut text.
    idx = core.find("-")
    if idx >= 0:
        core = core[:idx]
    idx = core.find("+")
    if idx >= 0:
        core = core[:idx]

    parts = core.split(".")
    if len(parts) != len(FIELDS):
        raise InvalidFormatError(core)
    values: list[int] = []
    for field, raw in zip(FIELDS, parts):
        if not _DIGITS.fullmatch(raw):
            raise InvalidFieldError(field, raw)
        values.append(int(raw))
    return SemanticVersion(values[0], values[1], values[2], has_prefix_v)


def format_semver(version: SemanticVersion) -> str:
    core = f"{version.major}.{version.minor}.{version.patch}"
    return f"v{core}" if version.has_prefix_v else core


def changed_field(previous: SemanticVersion, latest: SemanticVersion) -> str:
    """Highest-order field that differs; ``patch`` when nothing does."""
    if latest.major != previous.major:
        return "major"
    if latest.minor != previous.minor:
        return "minor"
    return "patch"


def apply_delta(
    previous: SemanticVersion, latest: SemanticVersion, current: SemanticVersion
) -> SemanticVersion:
    field = changed_field(previous, latest)
    delta = getattr(latest, field) - getattr(previous, field)
    value = getattr(current, field) + delta
    if value < 0:
        raise NegativeResultError(field)

    if field == "major":
        return SemanticVersion(value, 0, 0, current.has_prefix_v)
    if field == "minor":
        return SemanticVersion(current.major, value, 0, current.has_prefix_v)
    return SemanticVersion(current.major, current.minor, value, current.has_prefix_v)


def compute_applied(previous: str, latest: str, current: str) -> str:
    prev_v = parse_semver(previous)
    latest_v = parse_semver(latest)
    curr_v = parse_semver(current)
    return format_semver(apply_delta(prev_v, latest_v, curr_v))
