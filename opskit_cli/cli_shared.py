from __future__ import annotations

import sys
from typing import Callable

import click
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape


class OpskitError(Exception):
    pass


class UsageError(OpskitError):
    pass


class OpError(OpskitError):
    pass


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_ERROR_CONSOLE = Console(stderr=True)


def _rich_error(msg: str) -> None:
    _ERROR_CONSOLE.print(f"[bold red]error:[/bold red] {escape(msg)}", soft_wrap=True)


def _note(msg: str) -> None:
    _ERROR_CONSOLE.print(f"[dim]{escape(msg)}[/dim]", soft_wrap=True)


def _bootstrap_env() -> None:
    # Use python-dotenv package defaults: discover and load .env without
    # overriding already-exported process environment values.
    load_dotenv()


def _version_callback_for(prog_name: str, version: str) -> Callable[[bool], None]:
    def _callback(value: bool) -> None:
        if value:
            typer.echo(f"{prog_name} {version}")
            raise typer.Exit(code=0)

    return _callback


def _run_cli(*, root_app: typer.Typer, prog_name: str, argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        _bootstrap_env()
        result = root_app(args=argv, prog_name=prog_name, standalone_mode=False)
        if result is None:
            return EXIT_OK
        return int(result)
    except typer.Exit as e:
        return int(e.exit_code)
    except click.exceptions.Abort:
        _rich_error("aborted")
        return EXIT_FAILURE
    except click.ClickException as e:
        _rich_error(e.format_message())
        return int(e.exit_code)
    except UsageError as e:
        _rich_error(str(e))
        return EXIT_USAGE
    except OpError as e:
        _rich_error(str(e))
        return EXIT_FAILURE
