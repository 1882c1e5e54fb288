"""Basic geometry and the objects that live on the game board."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, Union


@dataclass(frozen=True)
class Point:
    """A cell coordinate on the board; ``up`` grows ``y``."""

    x: int
    y: int = 0

    def up(self) -> Point:
        return Point(self.x, self.y + 1)

    def down(self) -> Point:
        return Point(self.x, self.y - 1)

    def left(self) -> Point:
        return Point(self.x - 1, self.y)

    def right(self) -> Point:
        return Point(self.x + 1, self.y)


class Direction(IntEnum):
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3


class ObjectType(IntEnum):
    SNAKE = 1
    FOOD = 2
    BARRIER = 3


PointsLike = Union[Point, Iterable[Point]]


def _point_list(points: PointsLike) -> list[Point]:
    if isinstance(points, Point):
        return [points]
    return list(points)


class GameObject:
    """Something that occupies one or more cells and has a unique id."""

    _ids = itertools.count(1)

    def __init__(self, game_items: Any, object_type: ObjectType, points: PointsLike) -> None:
        self.game_items = game_items
        self.type = ObjectType(object_type)
        self.points: list[Point] = _point_list(points)
        self.id: int = next(GameObject._ids)

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "type": int(self.type)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, points={self.points!r})"


class Barrier(GameObject):
    """An impassable wall segment."""

    def __init__(self, game_items: Any, points: PointsLike) -> None:
        super().__init__(game_items, ObjectType.BARRIER, points)


class Food(GameObject):
    """Food a snake can eat."""

    def __init__(self, game_items: Any, points: PointsLike, food_score: int) -> None:
        super().__init__(game_items, ObjectType.FOOD, points)
        self.food_score = food_score