from __future__ import annotations

import sys

import typer

from . import __version__
from .cli_shared import _note, _run_cli, _version_callback_for
from .jwt_decode import decode_token, format_payload

PROG_NAME = "decode-jwt"

app = typer.Typer(
    name=PROG_NAME,
    help="Decode a JWT read from stdin and print its payload as JSON (no signature check).",
    add_completion=False,
)


def _read_token_line() -> str:
    # Only the first line counts; anything after it is ignored.
    return sys.stdin.readline().strip()


@app.command(help="Read one token line from stdin and pretty-print the decoded payload.")
def decode(
    sort_keys: bool = typer.Option(
        False,
        "--sort-keys",
        envvar="DECODE_JWT_SORT_KEYS",
        help="Emit payload keys in lexicographic order instead of token order",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Print decoding notes to stderr"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback_for(PROG_NAME, __version__),
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    del version
    token = _read_token_line()
    if not token:
        if verbose:
            _note("empty input; nothing to decode")
        return

    decoded = decode_token(token)
    if verbose:
        _note(
            f"decoded header ({len(decoded.header)} keys) and payload "
            f"({len(decoded.payload)} keys); signature not verified"
        )
    sys.stdout.write(format_payload(decoded.payload, sort_keys=sort_keys) + "\n")


def main(argv: list[str] | None = None) -> int:
    return _run_cli(root_app=app, prog_name=PROG_NAME, argv=argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
