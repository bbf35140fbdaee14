"""Grid placement for new canvas nodes."""

from __future__ import annotations

from dataclasses import dataclass

from .types import Position

NODE_WIDTH = 256
HORIZONTAL_SPACING = 50
VERTICAL_SPACING = 150
DEFAULT_POSITION = Position(100, 100)


@dataclass(frozen=True)
class CanvasLayout:
    """
    Non-overlapping sibling placement: the (N+1)-th child of a parent sits
    N slots to the right of the parent and one row below it.
    """

    node_width: float = NODE_WIDTH
    horizontal_spacing: float = HORIZONTAL_SPACING
    vertical_spacing: float = VERTICAL_SPACING
    default: Position = DEFAULT_POSITION

    @property
    def slot_width(self) -> float:
        return self.node_width + self.horizontal_spacing

    def default_position(self) -> Position:
        return self.default

    def child_position(self, parent: Position, sibling_count: int) -> Position:
        return Position(
            parent.x + max(sibling_count, 0) * self.slot_width,
            parent.y + self.vertical_spacing,
        )

    def below(self, parent: Position) -> Position:
        return Position(parent.x, parent.y + self.vertical_spacing)
