"""Snakes and the collection of everything that lives in one game."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Iterable

from .board import Board
from .game_object import Barrier, Direction, Food, GameObject, ObjectType, Point, PointsLike

DEFAULT_FOOD_SCORE = 100
DEFAULT_SNAKE_LENGTH = 20
DEFAULT_GROWTH = 10

_STEPS = {
    Direction.UP: Point.up,
    Direction.DOWN: Point.down,
    Direction.LEFT: Point.left,
    Direction.RIGHT: Point.right,
}


class SnakeStatus(IntEnum):
    ALIVE = 0
    DEAD = 1
    GROW = 2


class Snake(GameObject):
    """A player's snake; ``points[0]`` is the head after the first move."""

    def __init__(
        self,
        game_items: GameItems,
        player: Any,
        points: Iterable[Point],
        header: Point,
        length: int,
        direction: Direction = Direction.UP,
    ) -> None:
        super().__init__(game_items, ObjectType.SNAKE, list(points))
        self.player = player
        self.header = header
        self.length = length
        self.direction = Direction(direction)
        self.status = SnakeStatus.ALIVE

    def change_direction(self, direction: Direction) -> None:
        self.direction = Direction(direction)

    def move(self) -> None:
        """Drop the tail and put a new head one step in the current direction."""
        self.points.pop()
        self.header = _STEPS[self.direction](self.header)
        self.points.insert(0, self.header)

    def grow(self, length: int = DEFAULT_GROWTH) -> None:
        """Add ``length`` to the score length and one segment past the tail."""
        self.length += length
        tail = self.points[-1]
        tail_direction = Direction.UP
        if len(self.points) > 1:
            before = self.points[-2]
            dx = tail.x - before.x
            dy = tail.y - before.y
            if dx == 1:
                tail_direction = Direction.RIGHT
            elif dx == -1:
                tail_direction = Direction.LEFT
            elif dy == 1:
                tail_direction = Direction.DOWN
            elif dy == -1:
                tail_direction = Direction.UP
        self.points.append(_STEPS[tail_direction](tail))

    def die(self) -> None:
        """Turn every segment into food and leave the game."""
        for point in self.points:
            self.game_items.add_food(point, DEFAULT_FOOD_SCORE)
        self.game_items.remove_snake(self.id)

    def judge(self) -> None:
        """Set the status from what the head collides with."""
        items = self.game_items
        for snake in items.snakes:
            if snake is not self and self.header in snake.points:
                self.status = SnakeStatus.DEAD
        for barrier in items.barriers:
            if self.header in barrier.points:
                self.status = SnakeStatus.DEAD
        for food in items.foods:
            if self.header in food.points:
                self.status = SnakeStatus.GROW

    def react(self) -> None:
        if self.status is SnakeStatus.DEAD:
            self.die()
        elif self.status is SnakeStatus.GROW:
            self.grow()


class GameItems:
    """All snakes, foods and barriers of one game, drawn onto a board."""

    def __init__(self, board: Board) -> None:
        self.board = board
        self.frame = 0
        self.snakes: list[Snake] = []
        self.foods: list[Food] = []
        self.barriers: list[Barrier] = []

    def snake_by_player_id(self, player_id: int) -> Snake | None:
        return next(
            (s for s in self.snakes if s.player is not None and s.player.id == player_id),
            None,
        )

    def add_food(self, point: PointsLike, food_score: int = DEFAULT_FOOD_SCORE) -> Food:
        food = Food(self, point, food_score)
        self.foods.append(food)
        return food

    def add_random_food(self, food_score: int = DEFAULT_FOOD_SCORE) -> Food:
        """Place one food on a random free cell; LookupError if none is found."""
        return self.add_food(self.board.random_area(1, 1), food_score)

    def add_snake(self, player: Any) -> Snake:
        """Place a new two-segment snake for ``player`` at a random free spot."""
        points = self.board.random_area(1, 2)
        snake = Snake(self, player, points, points[0], DEFAULT_SNAKE_LENGTH, Direction.UP)
        self.snakes.append(snake)
        return snake

    def add_barrier(self, points: PointsLike) -> Barrier:
        barrier = Barrier(self, points)
        self.barriers.append(barrier)
        return barrier

    def remove_snake(self, snake_id: int) -> None:
        for index, snake in enumerate(self.snakes):
            if snake.id == snake_id:
                del self.snakes[index]
                return

    def draw(self) -> None:
        for obj in [*self.snakes, *self.foods, *self.barriers]:
            self.board.draw(obj)

    def update(self) -> None:
        self.board.clear()
        self.draw()

    def to_json(self) -> dict[str, Any]:
        snakes = []
        for snake in self.snakes:
            data = snake.to_json()
            data["playerId"] = snake.player.id if snake.player is not None else None
            data["playerName"] = snake.player.name if snake.player is not None else None
            snakes.append(data)
        return {
            "snakes": snakes,
            "foods": [food.to_json() for food in self.foods],
            "barriers": [barrier.to_json() for barrier in self.barriers],
        }