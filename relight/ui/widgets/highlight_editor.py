"""Subject text editor with live match highlighting."""

from typing import Optional

from rich.cells import get_character_cell_size
from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.containers import ScrollableContainer
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Static, TextArea

from ...presentation.formatter import RegexFormatter
from ...presentation.renderer import MarkedText, render
from ..scroll_sync import ScrollLink


def cell_to_column(line: str, cell: int, tab_size: int) -> int:
    """Character column under screen cell ``cell`` of ``line``, tabs expanded."""
    position = 0
    for column, char in enumerate(line):
        if char == "\t":
            width = tab_size - position % tab_size
        else:
            width = get_character_cell_size(char)
        if cell < position + width:
            return column
        position += width
    return len(line)


class HighlightEditor(Widget):
    """Two stacked layers over one text buffer.

    The TextArea below owns the text, the caret and the keyboard; its glyphs
    are covered. The backdrop above draws the highlighted spans plus the caret
    and follows the TextArea's scroll offset through a ScrollLink. Mouse
    clicks and wheel events land on the backdrop and are passed down.
    """

    DEFAULT_CSS = """
    HighlightEditor {
        layers: input backdrop;
        height: 1fr;
    }
    HighlightEditor > #subject-input {
        layer: input;
        height: 1fr;
        border: none;
        padding: 0;
        scrollbar-size: 0 0;
    }
    HighlightEditor > #backdrop {
        layer: backdrop;
        height: 1fr;
        overflow: hidden hidden;
        scrollbar-size: 0 0;
    }
    HighlightEditor > #backdrop > #backdrop-text {
        width: auto;
        padding: 0 1 0 0;
    }
    """

    class Changed(Message):
        """Posted when the subject text is edited."""

        def __init__(self, editor: "HighlightEditor", text: str) -> None:
            self.editor = editor
            self.text = text
            super().__init__()

    class CaretMoved(Message):
        """Posted when the caret moves; ``offset`` indexes the text."""

        def __init__(self, editor: "HighlightEditor", offset: int) -> None:
            self.editor = editor
            self.offset = offset
            super().__init__()

    def __init__(self, text: str = "", formatter: Optional[RegexFormatter] = None, id: str | None = None):
        super().__init__(id=id)
        self._text = text
        self.formatter = formatter or RegexFormatter()
        self.marked: MarkedText = render(text, ())
        self.current_match_index = -1
        self.scroll_link = ScrollLink()
        self.rendered = Text()

    @property
    def text(self) -> str:
        return self._text

    def compose(self) -> ComposeResult:
        yield TextArea(self._text, id="subject-input", soft_wrap=False, show_line_numbers=False)
        with ScrollableContainer(id="backdrop", can_focus=False):
            yield Static(id="backdrop-text")

    def on_mount(self) -> None:
        text_area = self._text_area()
        backdrop = self.query_one("#backdrop", ScrollableContainer)
        # The backdrop has no scrollbars, so the scroll has to be forced
        self.scroll_link = ScrollLink(
            lambda x, y: backdrop.scroll_to(x=x, y=y, animate=False, force=True)
        )
        self.watch(text_area, "scroll_x", self._on_input_scrolled, init=False)
        self.watch(text_area, "scroll_y", self._on_input_scrolled, init=False)
        self.watch(backdrop, "scroll_x", self._on_backdrop_scrolled, init=False)
        self.watch(backdrop, "scroll_y", self._on_backdrop_scrolled, init=False)
        self._refresh_backdrop()

    def _text_area(self) -> TextArea:
        return self.query_one("#subject-input", TextArea)

    def _on_input_scrolled(self, _value: float) -> None:
        text_area = self._text_area()
        self.scroll_link.on_input_scroll(text_area.scroll_x, text_area.scroll_y)

    def _on_backdrop_scrolled(self, _value: float) -> None:
        backdrop = self.query_one("#backdrop", ScrollableContainer)
        self.scroll_link.on_backdrop_scroll(backdrop.scroll_x, backdrop.scroll_y)

    def cursor_offset(self) -> int:
        """Cursor position as an offset into the text."""
        row, column = self._text_area().cursor_location
        lines = self._text.split("\n")
        return sum(len(line) + 1 for line in lines[:row]) + column

    def caret_offset(self) -> Optional[int]:
        """Cursor offset while the editor has focus, otherwise None."""
        if not self._text_area().has_focus:
            return None
        return self.cursor_offset()

    def _refresh_backdrop(self) -> None:
        self.rendered = self.formatter.create_backdrop_output(
            self.marked,
            self.caret_offset(),
            self.current_match_index,
            tab_size=self._text_area().indent_width,
        )
        self.query_one("#backdrop-text", Static).update(self.rendered)
        self._on_input_scrolled(0)

    def set_marked_text(self, marked: MarkedText, current_match_index: int = -1) -> None:
        """Show a new rendering of the current text."""
        self.marked = marked
        self.current_match_index = current_match_index
        self._refresh_backdrop()

    def focus_input(self) -> None:
        self._text_area().focus()

    def reveal_offset(self, offset: int) -> None:
        """Put the caret at ``offset``; the editor scrolls and the backdrop follows."""
        before = self._text[:offset]
        row = before.count("\n")
        column = len(before) - (before.rfind("\n") + 1)
        self._text_area().move_cursor((row, column), center=True)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        event.stop()
        self._text = event.text_area.text
        # Keep showing plain text until the owner sends a fresh rendering
        self.marked = render(self._text, ())
        self._refresh_backdrop()
        self.post_message(self.Changed(self, self._text))

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        event.stop()
        self._refresh_backdrop()
        self.post_message(self.CaretMoved(self, self.cursor_offset()))

    def on_descendant_focus(self, event: events.DescendantFocus) -> None:
        self._refresh_backdrop()

    def on_descendant_blur(self, event: events.DescendantBlur) -> None:
        self._refresh_backdrop()

    def on_click(self, event: events.Click) -> None:
        """Clicks land on the backdrop; move the hidden editor's caret there."""
        text_area = self._text_area()
        row = max(event.screen_y - self.region.y + round(text_area.scroll_y), 0)
        cell = max(event.screen_x - self.region.x + round(text_area.scroll_x), 0)
        lines = self._text.split("\n")
        row = min(row, len(lines) - 1)
        column = cell_to_column(lines[row], cell, text_area.indent_width)
        text_area.focus()
        text_area.move_cursor((row, column))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        if event.shift or event.ctrl:
            self._text_area().scroll_right(animate=False)
        else:
            self._text_area().scroll_down(animate=False)

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        if event.shift or event.ctrl:
            self._text_area().scroll_left(animate=False)
        else:
            self._text_area().scroll_up(animate=False)

    def on_mouse_scroll_right(self, event: events.MouseEvent) -> None:
        event.stop()
        self._text_area().scroll_right(animate=False)

    def on_mouse_scroll_left(self, event: events.MouseEvent) -> None:
        event.stop()
        self._text_area().scroll_left(animate=False)
