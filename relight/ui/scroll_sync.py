"""Scroll synchronization between the editable layer and its highlighted backdrop."""

from typing import Callable, Optional, Tuple

Offset = Tuple[int, int]


class ScrollLink:
    """Mirrors the input surface's scroll offset onto the backdrop.

    The link is one-way: the backdrop is never scrolled by the user, it only
    follows. ``apply`` asks the backdrop widget to scroll; the widget reports
    where it actually ended up through :meth:`on_backdrop_scroll`. The link
    holds no widget, so it can be driven without a screen.
    """

    def __init__(self, apply: Optional[Callable[[int, int], None]] = None):
        self._apply = apply
        self.input_offset: Offset = (0, 0)
        self.backdrop_offset: Offset = (0, 0)

    def on_input_scroll(self, x: float, y: float) -> Offset:
        """Record a scroll of the input surface and mirror it immediately."""
        offset = (round(x), round(y))
        self.input_offset = offset
        # Re-applied even when unchanged: a backdrop refresh may have reset it
        if self._apply is not None:
            self._apply(*offset)
        return offset

    def on_backdrop_scroll(self, x: float, y: float) -> Offset:
        """Record the offset the backdrop really has."""
        self.backdrop_offset = (round(x), round(y))
        return self.backdrop_offset

    @property
    def in_sync(self) -> bool:
        return self.input_offset == self.backdrop_offset
