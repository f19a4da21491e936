"""Formatter for regex match output."""

from typing import Optional, Sequence

from rich import box
from rich.table import Table
from rich.text import Text

from ..data_providers.pattern_tokenizer import TokenKind
from ..data_providers.regex_provider import MatchRecord
from .palette import DEFAULT_PALETTE, ColorPalette
from .renderer import HighlightSpan, MarkedText, SyntaxSpan


class RegexFormatter:
    """Formats MarkedText and match records for display."""

    TOKEN_STYLES = {
        TokenKind.ESCAPE: "bold magenta",
        TokenKind.CHAR_CLASS: "green",
        TokenKind.GROUP: "cyan",
        TokenKind.QUANTIFIER: "bold yellow",
        TokenKind.OPERATOR: "bold red",
        TokenKind.LITERAL: "",
    }

    CARET_STYLE = "reverse"

    def __init__(self, palette: ColorPalette = DEFAULT_PALETTE):
        """Initialize the formatter.

        Args:
            palette: Styles used for the color slots of highlighted spans
        """
        self.palette = palette

    def create_highlighted_output(self, marked: MarkedText, current_match_index: int = -1) -> Text:
        """Create a styled Text from rendered spans.

        Args:
            marked: Spans produced by the renderer
            current_match_index: Match to emphasise (default: -1 for none)

        Returns:
            Text object with highlighting applied
        """
        text = Text()
        for span in marked:
            if isinstance(span, HighlightSpan):
                style = self.palette.style_for(span.color_slot)
                if span.match_index == current_match_index:
                    # Current match gets inverted
                    style = f"reverse {style}"
                text.append(span.text, style=style)
            elif isinstance(span, SyntaxSpan):
                text.append(span.text, style=self.TOKEN_STYLES[span.kind])
            else:
                text.append(span.text)
        return text

    def create_pattern_output(self, marked: MarkedText) -> Text:
        """Syntax-colored pattern."""
        return self.create_highlighted_output(marked)

    def create_backdrop_output(
        self,
        marked: MarkedText,
        caret: Optional[int] = None,
        current_match_index: int = -1,
        tab_size: int = 4,
    ) -> Text:
        """Highlighted text with the editor caret drawn in.

        The caret is painted over the character it sits on; at a line end or
        at the end of the text a reversed blank cell is inserted instead.
        Tabs are expanded to the editor's tab stops so every cell lines up.
        """
        text = self.create_highlighted_output(marked, current_match_index)
        if caret is not None and caret >= 0:
            plain = text.plain
            caret = min(caret, len(plain))
            if caret < len(plain) and plain[caret] != "\n":
                text.stylize(self.CARET_STYLE, caret, caret + 1)
            else:
                text = text[:caret] + Text(" ", style=self.CARET_STYLE) + text[caret:]

        text.expand_tabs(tab_size)
        return text

    @staticmethod
    def get_match_positions(matches: Sequence[MatchRecord]) -> list[int]:
        """Get the start positions of all matches."""
        return [match.start for match in matches]

    @staticmethod
    def create_groups_output(matches: Sequence[MatchRecord]) -> Table:
        """Create a table of every match and its groups.

        Args:
            matches: Resolved matches

        Returns:
            Rich Table with one row per match and one per group
        """
        table = Table(
            box=box.ROUNDED,
            expand=True,
            show_header=True,
            show_lines=False,
            padding=(0, 1)
        )
        table.add_column("Match", style="cyan", no_wrap=True, width=6)
        table.add_column("Group", style="magenta", no_wrap=True, width=6)
        table.add_column("Name", style="green", width=12)
        table.add_column("Value", style="white")
        table.add_column("Span", style="yellow", justify="right", width=12)

        for match in matches:
            ordinal = str(match.index + 1)
            table.add_row(
                ordinal,
                "0",
                "-",
                Text(match.full_text),
                f"{match.start}-{match.end}"
            )
            for group in match.groups:
                table.add_row(
                    ordinal,
                    str(group.group_number),
                    group.name or "-",
                    Text(group.text),
                    f"{group.start}-{group.end}"
                )

        return table

    @staticmethod
    def create_summary_text(matches: Sequence[MatchRecord]) -> str:
        """Plain-text listing of the matches, as shown in the details pane."""
        if not matches:
            return "No matches found."

        blocks = []
        for match in matches:
            lines = [f'Match {match.index + 1}: "{match.full_text}"', f"Index: {match.start}"]
            if match.named_groups:
                lines.append("Groups:")
                lines.extend(f'  {group.name}: "{group.text}"' for group in match.named_groups)
            if match.unnamed_groups:
                lines.append("Unnamed Groups:")
                lines.extend(f'  {group.group_number}: "{group.text}"' for group in match.unnamed_groups)
            blocks.append("\n".join(lines))

        return f"Found {len(matches)} match(es):\n\n" + "\n\n".join(blocks)
