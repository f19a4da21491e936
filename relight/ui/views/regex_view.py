"""Regex interactive TUI application."""

import asyncio
import re
from typing import Callable, Optional, cast

import pyperclip
from rich.markup import escape
from textual import on
from textual.app import App, ComposeResult, ReturnType
from textual.containers import Horizontal, ScrollableContainer, Vertical
from textual.widgets import Footer, Header, Input, Select, Static

from ...data_providers.pattern_engine import FLAG_OPTIONS
from ...data_providers.profile_manager import ProfileManager
from ...data_providers.regex_provider import DEFAULT_FLAGS
from ...data_providers.tester_session import Evaluation, RegexTesterSession
from ...presentation.formatter import RegexFormatter
from ...presentation.palette import ColorPalette
from ...presentation.renderer import HighlightSpan, span_at
from ...utils.logger import get_logger
from ...utils.regex_help import REGEX_HELP
from ..widgets.flags_widget import FlagsWidget
from ..widgets.highlight_editor import HighlightEditor

logger = get_logger(__name__)

# Terminal escape sequences that leak into Input values (mouse reports etc.)
_CSI_SEQUENCE = re.compile(r'(\x1b\[|\x9b)[0-9;<>?]*[a-zA-Z]')
_LITERAL_MOUSE_CODE = re.compile(r'\^\[\[<[\d;]+[mM]')
_ERROR_POSITION = re.compile(r"at position (\d+)")


# noinspection SpellCheckingInspection
class RelightApp(App[ReturnType]):
    """Main TUI application for regex testing."""

    CSS_PATH = "../../relight.tcss"

    BINDINGS = [
        ("f2", "toggle_view", "Toggle View"),
        ("f3", "next_match", "Next Match"),
        ("shift+f3", "prev_match", "Prev Match"),
        ("f4", "copy_pattern", "Copy Pattern"),
        ("f5", "focus_input", "Pattern"),
        ("f6", "focus_editor", "Text"),
        ("escape", "quit", "Quit"),
    ]

    VIEW_HEADERS = ("Match Details", "Match Summary", "Regex Help")

    def __init__(
        self,
        input_content: str,
        initial_pattern: Optional[str] = None,
        initial_flags: Optional[str] = None,
        profile_id: Optional[str] = None,
    ):
        """Initialize the Relight TUI application.

        Args:
            input_content: The text content to test regex against
            initial_pattern: Initial regex pattern to display
            initial_flags: Initial flag string; defaults to the profile's flags
            profile_id: Engine profile to start with
        """
        super().__init__()
        self.input_content: str = input_content

        self.profile_manager = ProfileManager()
        self.profile_id = profile_id or self.profile_manager.get_default_profile_id()
        profile = self.profile_manager.get_profile(self.profile_id)
        if initial_flags is None:
            initial_flags = profile.default_flags if profile else DEFAULT_FLAGS

        palette = ColorPalette.from_styles(self.profile_manager.palette)
        self.formatter = RegexFormatter(palette)
        self.session = RegexTesterSession(
            pattern=initial_pattern or "",
            flags=initial_flags,
            subject=input_content,
            profile=profile,
            palette=palette,
        )

        # Match navigation tracking
        self.match_positions: list[int] = []
        self.current_match_index: int = -1

        # 0: match table, 1: summary text, 2: help
        self.view_mode = 0

        # Bumped per requested evaluation; older results are dropped
        self.evaluation_generation = 0
        self.match_info = ""

    @property
    def pattern(self) -> str:
        return self.session.pattern

    def compose(self) -> ComposeResult:
        """Compose the UI layout."""
        yield Header()
        with Horizontal(id="input-row"):
            with Vertical(id="input-controls"):
                yield Input(value=self.session.pattern, placeholder="Regular Expression...", id="pattern_input")
                yield Static(id="pattern_preview")
            yield Input(value=self.session.flags, placeholder="flags", id="flags_input")

            profiles = [(p.name, p.id) for p in self.profile_manager.list_profiles()]
            if profiles:
                yield Select(
                    profiles,
                    value=self.profile_id,
                    id="profile_select",
                    allow_blank=False
                )

        yield FlagsWidget(self.session.flags, id="flags_widget")

        with Horizontal(id="result"):
            with Vertical(id="editor-container"):
                yield Static("Test String", id="editor-header")
                yield HighlightEditor(self.input_content, self.formatter, id="editor")
                yield Static(id="match-info")
            with ScrollableContainer(id="groups-container", can_focus=True):
                yield Static(self.VIEW_HEADERS[0], id="panel-header")
                yield Static(id="groups")
                yield Static(id="summary")
                yield Static(id="help", markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#summary", Static).display = False
        self.query_one("#help", Static).display = False
        self.refresh_results()

    def get_help_content(self) -> str:
        """Generate help content for the syntax and the flags."""
        lines = []
        if self.session.profile:
            lines.append(f"[bold cyan]{escape(self.session.profile.name)}[/bold cyan]")
            lines.append(f"[dim]{escape(self.session.profile.description)}[/dim]\n")

        for category, items in REGEX_HELP.items():
            lines.append(f"[bold]{category}:[/bold]")
            for pattern, description in items.items():
                lines.append(f"[cyan]{escape(pattern):<14}[/cyan] {description}")
            lines.append("")

        lines.append("[bold]Flags:[/bold]")
        for option in FLAG_OPTIONS:
            lines.append(f"[cyan]{option.flag}[/cyan]  {option.label}: {option.description}")

        lines.append("\n[dim]Press F2 to toggle view[/dim]")
        return "\n".join(lines)

    def format_error(self, error: str, pattern: str) -> str:
        """Render an engine error, with a pointer when it names a position."""
        error_msg = f"[bold red]Regex Error:[/bold red] {escape(error)}"

        pos_match = _ERROR_POSITION.search(error)
        if not pos_match:
            return error_msg

        pos = int(pos_match.group(1))
        # Limit pattern display length if it's too long
        start = max(0, pos - 20)
        end = min(len(pattern), pos + 20)

        prefix = "..." if start > 0 else ""
        suffix = "..." if end < len(pattern) else ""

        snippet = escape(pattern[start:end])
        pointer_pos = pos - start

        pointer_line = " " * (pointer_pos + len(prefix)) + "[bold red]^[/bold red]"
        pattern_line = f"{prefix}[cyan]{snippet}[/cyan]{suffix}"

        return error_msg + f"\n\n[dim]Error location:[/dim]\n{pattern_line}\n{pointer_line}"

    def refresh_results(self) -> None:
        """Push the session's latest evaluation into the widgets."""
        evaluation = self.session.evaluation
        matches = evaluation.resolution.matches

        self.query_one("#pattern_preview", Static).update(
            self.formatter.create_pattern_output(evaluation.highlighted_pattern)
        )

        self.match_positions = self.formatter.get_match_positions(matches)
        if not self.match_positions:
            self.current_match_index = -1
        elif not 0 <= self.current_match_index < len(self.match_positions):
            self.current_match_index = 0

        groups_widget = self.query_one("#groups", Static)
        if self.session.error_message:
            groups_widget.update(self.format_error(self.session.error_message, evaluation.pattern))
        elif not evaluation.pattern:
            groups_widget.update("[dim]Enter a regex pattern to see matches[/dim]")
        elif not matches:
            groups_widget.update("[dim]No matches found[/dim]")
        else:
            groups_widget.update(self.formatter.create_groups_output(matches))

        self.query_one("#summary", Static).update(escape(self.session.get_summary_text()))

        count = len(matches)
        header = "Test String"
        if count:
            header += f"  [green]{count} match{'es' if count != 1 else ''}[/green]"
        self.query_one("#editor-header", Static).update(header)

        editor = self.query_one("#editor", HighlightEditor)
        editor.set_marked_text(evaluation.highlighted_subject, self.current_match_index)
        self.show_match_info(editor.cursor_offset())

    def show_match_info(self, offset: int) -> None:
        """Describe the match under the caret below the editor."""
        span = span_at(self.session.get_highlighted_subject(), offset)
        self.match_info = span.tooltip if isinstance(span, HighlightSpan) else ""
        self.query_one("#match-info", Static).update(escape(self.match_info))

    def request_evaluation(
        self,
        pattern: Optional[str] = None,
        flags: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> None:
        """Re-run the pattern off the event loop with the changed inputs."""
        job = self.session.prepare(pattern=pattern, flags=flags, subject=subject)
        self.evaluation_generation += 1
        self.run_worker(
            self._evaluate_in_background(self.evaluation_generation, job), exclusive=True, group="evaluate"
        )

    async def _evaluate_in_background(self, generation: int, job: Callable[[], Evaluation]) -> None:
        evaluation = await asyncio.to_thread(job)
        self.apply_evaluation(generation, evaluation)

    def apply_evaluation(self, generation: int, evaluation: Evaluation) -> bool:
        """Show ``evaluation`` unless a newer one has been requested since."""
        if generation != self.evaluation_generation:
            logger.debug("Dropping stale evaluation %d (current %d)", generation, self.evaluation_generation)
            return False
        self.session.adopt(evaluation)
        self.refresh_results()
        return True

    def action_toggle_view(self) -> None:
        """Cycle the side panel between the match table, summary and help."""
        self.view_mode = (self.view_mode + 1) % len(self.VIEW_HEADERS)

        groups_widget = self.query_one("#groups", Static)
        summary_widget = self.query_one("#summary", Static)
        help_widget = self.query_one("#help", Static)

        groups_widget.display = self.view_mode == 0
        summary_widget.display = self.view_mode == 1
        help_widget.display = self.view_mode == 2
        if self.view_mode == 2:
            help_widget.update(self.get_help_content())

        self.query_one("#panel-header", Static).update(self.VIEW_HEADERS[self.view_mode])

    def action_quit(self) -> None:
        """Quit the application."""
        self.exit()

    def action_focus_input(self) -> None:
        self.query_one("#pattern_input", Input).focus()

    def action_focus_editor(self) -> None:
        self.query_one("#editor", HighlightEditor).focus_input()

    def action_next_match(self) -> None:
        """Navigate to the next match."""
        if not self.match_positions:
            return

        self.current_match_index = (self.current_match_index + 1) % len(self.match_positions)
        self._show_current_match()

    def action_prev_match(self) -> None:
        """Navigate to the previous match."""
        if not self.match_positions:
            return

        self.current_match_index = (self.current_match_index - 1) % len(self.match_positions)
        self._show_current_match()

    def _show_current_match(self) -> None:
        editor = self.query_one("#editor", HighlightEditor)
        editor.reveal_offset(self.match_positions[self.current_match_index])
        # While an edit is being evaluated the old highlights no longer fit the text
        if self.session.evaluation.subject == editor.text:
            editor.set_marked_text(self.session.get_highlighted_subject(), self.current_match_index)

    def action_copy_pattern(self) -> None:
        """Copy the current pattern to the clipboard."""
        if not self.session.pattern:
            self.notify("Nothing to copy", severity="warning")
            return

        try:
            pyperclip.copy(self.session.pattern)
        except pyperclip.PyperclipException as e:
            logger.warning("Clipboard unavailable: %s", e)
            self.notify(f"Failed to copy: {e}", severity="error")
            return
        self.notify("Pattern copied to clipboard!", severity="information")

    @on(Input.Changed, "#pattern_input")
    def on_pattern_changed(self, message: Input.Changed) -> None:
        """Handle pattern field changes."""
        clean_value = _CSI_SEQUENCE.sub('', message.value)
        clean_value = _LITERAL_MOUSE_CODE.sub('', clean_value)

        if clean_value != message.value:
            # The update will trigger another Changed event
            message.input.value = clean_value
            return

        self.request_evaluation(pattern=clean_value)

    @on(Input.Changed, "#flags_input")
    def on_flags_changed(self, message: Input.Changed) -> None:
        self.query_one("#flags_widget", FlagsWidget).update_from_flags(message.value)
        self.request_evaluation(flags=message.value)

    @on(FlagsWidget.Toggled)
    def on_flag_toggled(self, message: FlagsWidget.Toggled) -> None:
        """Mirror a checkbox into the flags field, which re-runs the pattern."""
        if (message.flag in self.session.flags) == message.enabled:
            return
        flags = self.session.flags
        flags = flags + message.flag if message.enabled else flags.replace(message.flag, "")
        self.query_one("#flags_input", Input).value = flags

    @on(Input.Submitted)
    def on_input_submitted(self, message: Input.Submitted) -> None:
        """Handle Enter key in input field."""
        self.action_focus_editor()

    @on(Select.Changed, "#profile_select")
    def on_select_changed(self, message: Select.Changed) -> None:
        """Handle profile selection changes."""
        profile = self.profile_manager.get_profile(cast(str, message.value))
        if profile and profile is not self.session.profile:
            self.profile_id = profile.id
            self.session.use_profile(profile)
            self.request_evaluation()

    @on(HighlightEditor.Changed)
    def on_editor_changed(self, message: HighlightEditor.Changed) -> None:
        self.input_content = message.text
        self.request_evaluation(subject=message.text)

    @on(HighlightEditor.CaretMoved)
    def on_editor_caret_moved(self, message: HighlightEditor.CaretMoved) -> None:
        self.show_match_info(message.offset)
