"""Widget for toggling regex flags."""

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Checkbox

from ...data_providers.pattern_engine import FLAG_OPTIONS


class FlagsWidget(Horizontal):
    """One checkbox per recognised flag, kept in step with the flags input."""

    class Toggled(Message):
        """Posted when the user flips a flag."""
        def __init__(self, flag: str, enabled: bool) -> None:
            self.flag = flag
            self.enabled = enabled
            super().__init__()

    def __init__(self, flags: str, id: str | None = None):
        super().__init__(id=id)
        self.flags = flags
        self.checkboxes: dict[str, Checkbox] = {}

    def compose(self) -> ComposeResult:
        for option in FLAG_OPTIONS:
            checkbox = Checkbox(
                f"{option.flag} - {option.label}",
                value=option.flag in self.flags,
                id=f"flag_{option.flag}",
            )
            checkbox.tooltip = option.description
            self.checkboxes[option.flag] = checkbox
            yield checkbox

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        event.stop()
        flag = event.checkbox.id.replace("flag_", "")
        self.post_message(self.Toggled(flag, event.value))

    def update_from_flags(self, flags: str) -> None:
        """Update checkboxes to match a flag string typed by the user."""
        self.flags = flags
        for flag, checkbox in self.checkboxes.items():
            checkbox.value = flag in flags
