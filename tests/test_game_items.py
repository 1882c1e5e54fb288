import pytest

from snakeserver.board import Board
from snakeserver.game_items import GameItems, Snake, SnakeStatus
from snakeserver.game_object import Direction, ObjectType, Point
from snakeserver.player import Player


@pytest.fixture
def items():
    return GameItems(Board(15, 15))


def make_snake(items, points, direction=Direction.UP, player=None):
    player = player or Player("dora", 1)
    snake = Snake(items, player, points, points[0], 20, direction)
    items.snakes.append(snake)
    return snake


@pytest.mark.parametrize(
    "direction, step",
    [
        (Direction.UP, Point.up),
        (Direction.DOWN, Point.down),
        (Direction.LEFT, Point.left),
        (Direction.RIGHT, Point.right),
    ],
)
def test_move_in_each_direction(items, direction, step):
    snake = make_snake(items, [Point(5, 5), Point(5, 4)], direction)
    snake.move()
    assert snake.points == [step(Point(5, 5)), Point(5, 5)]
    assert snake.header == step(Point(5, 5))


def test_change_direction_affects_move(items):
    snake = make_snake(items, [Point(5, 5), Point(5, 4)])
    snake.change_direction(Direction.LEFT)
    snake.move()
    assert snake.points[0] == Point(5, 5).left()


def test_grow_horizontal_tail(items):
    snake = make_snake(items, [Point(5, 5), Point(6, 5)])
    snake.grow(5)
    assert snake.points[-1] == Point(6, 5).right()
    assert snake.length == 20 + 5


def test_grow_single_point_goes_up(items):
    snake = make_snake(items, [Point(3, 3)])
    snake.grow()
    assert snake.points == [Point(3, 3), Point(3, 3).up()]


def test_grow_vertical_tail_follows_rule(items):
    snake = make_snake(items, [Point(5, 5), Point(5, 6)])
    snake.grow(1)
    assert snake.points[-1] == Point(5, 6).down()
    assert len(snake.points) == 3


def test_judge_leaves_alive_when_free(items):
    snake = make_snake(items, [Point(5, 5), Point(5, 4)])
    snake.move()
    snake.judge()
    assert snake.status is SnakeStatus.ALIVE


def test_barrier_kills_and_leaves_food(items):
    items.add_barrier(Point(5, 6))
    snake = make_snake(items, [Point(5, 5), Point(5, 4)])
    snake.move()
    snake.judge()
    assert snake.status is SnakeStatus.DEAD
    body = list(snake.points)
    snake.react()
    assert snake not in items.snakes
    assert [f.points[0] for f in items.foods] == body


def test_other_snake_kills(items):
    make_snake(items, [Point(2, 6), Point(3, 6), Point(4, 6), Point(5, 6)], Direction.LEFT)
    snake = make_snake(items, [Point(5, 5), Point(5, 4)])
    snake.move()
    snake.judge()
    assert snake.status is SnakeStatus.DEAD


def test_food_makes_snake_grow(items):
    items.add_food(Point(5, 6))
    snake = make_snake(items, [Point(5, 5), Point(5, 4)])
    snake.move()
    snake.judge()
    assert snake.status is SnakeStatus.GROW
    snake.react()
    assert len(snake.points) == 3


def test_add_snake_at_random_free_place(items):
    player = Player("ann", 7)
    snake = items.add_snake(player)
    assert len(snake.points) == 2
    assert snake.header == snake.points[0]
    assert snake.player is player
    assert snake.direction is Direction.UP
    assert items.snake_by_player_id(player.id) is snake


def test_snake_by_player_id_missing(items):
    assert items.snake_by_player_id(-5) is None


def test_add_random_food_inside_board(items):
    food = items.add_random_food()
    (point,) = food.points
    assert 0 <= point.x < 15 and 0 <= point.y < 15
    assert food.food_score == 100
    items.update()
    assert items.board.cell(point.x, point.y).objects == [food]


def test_add_random_food_on_full_board_raises(items):
    items.add_barrier([Point(x, y) for x in range(15) for y in range(15)])
    items.update()
    with pytest.raises(LookupError):
        items.add_random_food()


def test_remove_snake(items):
    snake = make_snake(items, [Point(5, 5)])
    other = make_snake(items, [Point(8, 8)])
    items.remove_snake(snake.id)
    assert items.snakes == [other]


def test_update_redraws_board(items):
    snake = make_snake(items, [Point(5, 5), Point(5, 4)])
    items.add_barrier(Point(0, 0))
    items.update()
    assert items.board.cell(5, 4).objects == [snake]
    snake.move()
    items.update()
    assert items.board.cell(5, 4).is_empty()
    assert items.board.cell(5, 6).objects == [snake]
    picture = items.board.render()
    assert picture.count("@") == 2
    assert picture.count("#") == 1


def test_to_json(items):
    player = Player("dora", 3)
    snake = make_snake(items, [Point(5, 5)], player=player)
    food = items.add_food(Point(1, 1))
    barrier = items.add_barrier([Point(0, 0), Point(0, 1)])
    data = items.to_json()
    assert data["snakes"] == [
        {"id": snake.id, "type": int(ObjectType.SNAKE), "playerId": player.id, "playerName": "dora"}
    ]
    assert data["foods"] == [{"id": food.id, "type": int(ObjectType.FOOD)}]
    assert data["barriers"] == [{"id": barrier.id, "type": int(ObjectType.BARRIER)}]