from __future__ import annotations

import sys

import typer

from . import __version__
from .cli_shared import UsageError, _note, _run_cli, _version_callback_for
from .semver_delta import apply_delta, changed_field, format_semver, parse_semver

PROG_NAME = "get-forth-semver"

ENV_PREVIOUS = "GET_FORTH_SEMVER_PREVIOUS"
ENV_LATEST = "GET_FORTH_SEMVER_LATEST"
ENV_CURRENT = "GET_FORTH_SEMVER_CURRENT"

USAGE_HINT = f"usage: {PROG_NAME} [previous latest current] or with flags -previous -latest -current"

app = typer.Typer(
    name=PROG_NAME,
    help="Apply the previous->latest version bump to a current version.",
    add_completion=False,
)


def select_versions(
    *, previous: str, latest: str, current: str, positional: list[str]
) -> tuple[str, str, str]:
    if previous and latest and current:
        return previous, latest, current
    if len(positional) >= 3:
        return positional[0], positional[1], positional[2]
    raise UsageError(f"missing versions ({USAGE_HINT})")


@app.command(help="Print CURRENT shifted by the highest-order change between PREVIOUS and LATEST.")
def compute(
    versions: list[str] | None = typer.Argument(
        None,
        metavar="[PREVIOUS LATEST CURRENT]",
        help="Positional versions, used unless all three flags are set",
        show_default=False,
    ),
    previous: str = typer.Option(
        "", "-previous", "--previous", envvar=ENV_PREVIOUS, help="Previous semver (first positional arg)"
    ),
    latest: str = typer.Option(
        "", "-latest", "--latest", envvar=ENV_LATEST, help="Latest semver (second positional arg)"
    ),
    current: str = typer.Option(
        "",
        "-current",
        "--current",
        envvar=ENV_CURRENT,
        help="Current semver to apply change to (third positional arg)",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Print the detected change to stderr"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback_for(PROG_NAME, __version__),
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    del version
    prev_raw, latest_raw, curr_raw = select_versions(
        previous=previous,
        latest=latest,
        current=current,
        positional=list(versions or []),
    )
    prev_v = parse_semver(prev_raw)
    latest_v = parse_semver(latest_raw)
    curr_v = parse_semver(curr_raw)
    out = apply_delta(prev_v, latest_v, curr_v)
    if verbose:
        field = changed_field(prev_v, latest_v)
        delta = getattr(latest_v, field) - getattr(prev_v, field)
        _note(f"{field} delta {delta:+d} applied to {format_semver(curr_v)}")
    sys.stdout.write(format_semver(out) + "\n")


def main(argv: list[str] | None = None) -> int:
    return _run_cli(root_app=app, prog_name=PROG_NAME, argv=argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
