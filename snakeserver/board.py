"""The grid of cells that game objects are drawn onto."""

from __future__ import annotations

import random
from typing import Any

from .game_object import GameObject, ObjectType, Point

_GLYPHS = {
    ObjectType.SNAKE: "@",
    ObjectType.FOOD: "*",
    ObjectType.BARRIER: "#",
}
_EMPTY_GLYPH = "."


class Cell:
    """One square of the board and the objects currently on it."""

    def __init__(self, position: Point) -> None:
        self.position = position
        self.objects: list[GameObject] = []

    def add_object(self, obj: GameObject) -> None:
        self.objects.append(obj)

    def clear_objects(self) -> None:
        self.objects.clear()

    def is_empty(self) -> bool:
        return not self.objects

    def to_json(self) -> dict[str, Any]:
        return {"objs": [obj.to_json() for obj in self.objects if obj is not None]}


class Board:
    """A ``width`` x ``height`` grid, indexed by ``(x, y)``."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"board size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.rng = random.Random()
        self._cells = [[Cell(Point(x, y)) for y in range(height)] for x in range(width)]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def cell(self, x: int, y: int) -> Cell:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"point ({x}, {y}) is outside a {self.width}x{self.height} board")
        return self._cells[x][y]

    def random_area(self, width: int, height: int, max_attempts: int = 10) -> list[Point]:
        """Pick a random free ``width`` x ``height`` block, row by row from its corner.

        Raises LookupError when no free block was found within ``max_attempts``.
        """
        max_x = self.width - width - 1
        max_y = self.height - height - 1
        if width <= 0 or height <= 0 or max_x < 0 or max_y < 0:
            raise ValueError(
                f"a {width}x{height} area does not fit a {self.width}x{self.height} board"
            )
        for _ in range(max_attempts):
            ox = self.rng.randint(0, max_x)
            oy = self.rng.randint(0, max_y)
            area = [Point(ox + dx, oy + dy) for dy in range(height) for dx in range(width)]
            if all(self._cells[p.x][p.y].is_empty() for p in area):
                return area
        raise LookupError(
            f"no free {width}x{height} area found after {max_attempts} attempts"
        )

    def edges(self) -> list[Point]:
        """All border points: top and bottom rows, then the left and right columns."""
        points: list[Point] = []
        for x in range(self.width):
            points.append(Point(x, 0))
            points.append(Point(x, self.height - 1))
        for y in range(1, self.height - 1):
            points.append(Point(0, y))
            points.append(Point(self.width - 1, y))
        return points

    def clear(self) -> None:
        for column in self._cells:
            for cell in column:
                cell.clear_objects()

    def draw(self, obj: GameObject) -> None:
        for p in obj.points:
            self.cell(p.x, p.y).add_object(obj)

    def render(self) -> str:
        """A text picture of the board, one line per ``y``."""
        lines = (
            "".join(self._glyph(self._cells[x][y]) for x in range(self.width)) + "\n"
            for y in range(self.height)
        )
        return "".join(lines)

    @staticmethod
    def _glyph(cell: Cell) -> str:
        if cell.is_empty():
            return _EMPTY_GLYPH
        return _GLYPHS[cell.objects[0].type]

    def to_json(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "map": [[cell.to_json() for cell in column] for column in self._cells],
        }

    def __str__(self) -> str:
        return self.render()