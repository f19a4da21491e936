"""CLI parser for Relight."""

import os
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from typing_extensions import Annotated

from relight.data_providers.profile_manager import ProfileManager
from relight.data_providers.tester_session import RegexTesterSession
from relight.presentation.formatter import RegexFormatter
from relight.presentation.palette import ColorPalette
from relight.ui.views.regex_view import RelightApp
from relight.utils.logger import setup_logging

app = typer.Typer(no_args_is_help=False)


def is_stdin_a_tty() -> bool:
    """Check if stdin is a TTY."""
    return sys.stdin.isatty()


def print_report(content: str, pattern: str, flags: Optional[str], profile_id: Optional[str]) -> int:
    """Print highlighted text and the match table; return the exit code."""
    console = Console()
    manager = ProfileManager()
    profile = manager.get_profile(profile_id or manager.get_default_profile_id())
    palette = ColorPalette.from_styles(manager.palette)
    if flags is None:
        flags = profile.default_flags if profile else "gm"

    session = RegexTesterSession(pattern, flags, content, profile, palette)
    if session.error_message:
        console.print(f"[bold red]Regex Error:[/bold red] {escape(session.error_message)}", highlight=False)
        return 1

    formatter = RegexFormatter(palette)
    console.print(formatter.create_highlighted_output(session.get_highlighted_subject()))
    matches = session.get_match_summary()
    if matches:
        console.print(formatter.create_groups_output(matches))
    console.print(session.get_summary_text(), markup=False, highlight=False)
    return 0


@app.command()
def relight_cli(
    initial_pattern: Annotated[
        Optional[str],
        typer.Option(
            "--pattern",
            "-p",
            help="Initial regex pattern",
        ),
    ] = None,
    flags: Annotated[
        Optional[str],
        typer.Option(
            "--flags",
            "-f",
            help="Flag characters, e.g. 'gim' (default: the profile's flags)",
        ),
    ] = None,
    input_file: Annotated[
        Optional[str],
        typer.Option(
            "--input",
            "-i",
            help="Input file path",
        ),
    ] = None,
    profile: Annotated[
        Optional[str],
        typer.Option(
            "--profile",
            help="Engine profile id (ecmascript, pcre, python_re)",
        ),
    ] = None,
    report: Annotated[
        bool,
        typer.Option(
            "--print",
            help="Print the matches and exit instead of starting the TUI",
        ),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level"),
    ] = "WARNING",
    log_file: Annotated[
        Optional[str],
        typer.Option("--log-file", help="Append log records to this file"),
    ] = None,
) -> None:
    """Run the Relight TUI."""
    setup_logging(log_level, log_file, console=report)

    input_content = ""
    if input_file:
        try:
            with open(input_file, "r") as f:
                input_content = f.read()
        except FileNotFoundError:
            print(f"Error: File '{input_file}' not found.")
            raise typer.Exit(code=1)
    elif not is_stdin_a_tty():
        # Read from stdin
        input_content = sys.stdin.read()

        # Reopen stdin as tty for Textual
        if not report and sys.platform != "win32":
            tty = open("/dev/tty", "r")
            os.dup2(tty.fileno(), 0)
            sys.stdin = os.fdopen(0, "r")
    else:
        # No input provided
        print("Error: No input provided. Pipe text to relight or use --input file.")
        raise typer.Exit(code=1)

    if report:
        if not initial_pattern:
            print("Error: --print needs a --pattern.")
            raise typer.Exit(code=1)
        raise typer.Exit(code=print_report(input_content, initial_pattern, flags, profile))

    tui = RelightApp(input_content, initial_pattern=initial_pattern, initial_flags=flags, profile_id=profile)
    tui.run()


if __name__ == "__main__":
    app()
