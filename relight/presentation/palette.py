"""Color slot assignment for capture groups."""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

FULL_MATCH_SLOT = 0

# Slot 0 is the full match; the rest cycle by group number.
DEFAULT_GROUP_STYLES: Tuple[str, ...] = (
    "bold white on #444444",
    "bold white on dark_cyan",
    "bold white on dark_green",
    "bold black on yellow",
    "bold white on dark_magenta",
    "bold white on dark_blue",
    "bold black on bright_cyan",
    "bold black on bright_magenta",
)


@dataclass(frozen=True)
class ColorPalette:
    """An ordered list of Rich styles indexed by color slot.

    A group's slot is ``group_number % size``, so a given group number always
    gets the same color for a given palette.
    """
    styles: Tuple[str, ...] = DEFAULT_GROUP_STYLES

    def __post_init__(self):
        if not self.styles:
            raise ValueError("A palette needs at least one style")

    @classmethod
    def from_styles(cls, styles: Sequence[str]) -> "ColorPalette":
        """Build a palette, falling back to the defaults for an empty sequence."""
        return cls(tuple(styles)) if styles else cls()

    @property
    def size(self) -> int:
        return len(self.styles)

    def slot_for(self, group_number: Optional[int]) -> int:
        if group_number is None:
            return FULL_MATCH_SLOT
        return group_number % self.size

    def style_for(self, slot: int) -> str:
        return self.styles[slot % self.size]


DEFAULT_PALETTE = ColorPalette()
