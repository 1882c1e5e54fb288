import queue

import pytest

from snakeserver.game_items import DEFAULT_GROWTH, Snake
from snakeserver.game_object import Direction, ObjectType, Point
from snakeserver.game_thread import GameThread
from snakeserver.info import ReceivedInfo, ResponseCode
from snakeserver.player import Player, PlayerState
from snakeserver.room import Room, RoomState


def drain(q):
    items = []
    while True:
        try:
            items.append(q.get_nowait())
        except queue.Empty:
            return items


def game_info(room, player_id, op_type, ws=9, data=None):
    payload = {"type": op_type}
    if data is not None:
        payload["data"] = data
    message = {"type": 1, "roomId": room.id, "playerId": player_id, "payload": payload}
    return ReceivedInfo.from_json(message, ws)


@pytest.fixture
def setup():
    room = Room()
    player = Player("alice", 9, PlayerState.READY)
    room.add_player(player)
    sends = queue.Queue()
    return room, player, sends, GameThread(room, sends)


def place_snake(room, player, points, direction):
    snake = Snake(room.game_items, player, points, points[0], 20, direction)
    room.game_items.snakes.append(snake)
    return snake


def test_get_game_info_returns_game_json(setup):
    room, player, sends, gt = setup
    gt.handle_operation(game_info(room, player.id, 3))
    reply = sends.get_nowait()
    assert reply.target_ids == (9,)
    assert reply.code is ResponseCode.SUCCESS
    assert reply.data == room.game_json()


def test_born_adds_snake_for_player(setup):
    room, player, sends, gt = setup
    gt.handle_operation(game_info(room, player.id, 2))
    assert sends.get_nowait().code is ResponseCode.SUCCESS
    assert room.game_items.snake_by_player_id(player.id).player is player


def test_born_unknown_player_fails(setup):
    room, player, sends, gt = setup
    gt.handle_operation(game_info(room, player.id + 1000, 2))
    assert sends.get_nowait().code is ResponseCode.FAILED
    assert room.game_items.snakes == []


def test_change_direction(setup):
    room, player, sends, gt = setup
    gt.handle_operation(game_info(room, player.id, 2))
    gt.handle_operation(game_info(room, player.id, 1, data={"newDirection": 2}))
    codes = [r.code for r in drain(sends)]
    assert codes == [ResponseCode.SUCCESS, ResponseCode.SUCCESS]
    assert room.game_items.snake_by_player_id(player.id).direction is Direction.LEFT


def test_change_direction_without_snake_fails(setup):
    room, player, sends, gt = setup
    gt.handle_operation(game_info(room, player.id, 1, data={"newDirection": 3}))
    assert sends.get_nowait().code is ResponseCode.FAILED


def test_unknown_operation(setup):
    room, player, sends, gt = setup
    gt.handle_operation(game_info(room, player.id, 99))
    reply = sends.get_nowait()
    assert reply.code is ResponseCode.FAILED
    assert reply.msg == "Unknown type"


def test_init_game_builds_walls_and_snakes(setup):
    room, player, sends, gt = setup
    gt.init_game()
    assert room.game_items.barriers[0].points == room.board.edges()
    assert [s.player for s in room.game_items.snakes] == [player]
    assert room.board.cell(0, 0).objects[0].type is ObjectType.BARRIER


def test_step_moves_snake_and_broadcasts(setup):
    room, player, sends, gt = setup
    room.frame = 1
    snake = place_snake(room, player, [Point(5, 5), Point(5, 4)], Direction.RIGHT)
    gt.step()
    assert snake.points == [Point(6, 5), Point(5, 5)]
    assert room.frame == 2
    reply = sends.get_nowait()
    assert reply.code is ResponseCode.UPDATE
    assert reply.target_ids == (player.ws_id,)
    assert reply.data["frame"] == 1
    assert room.board.cell(6, 5).objects == [snake]


def test_step_applies_queued_operations(setup):
    room, player, sends, gt = setup
    room.frame = 1
    snake = place_snake(room, player, [Point(5, 5), Point(5, 4)], Direction.UP)
    room.push_operation(game_info(room, player.id, 1, data={"newDirection": 3}))
    gt.step()
    assert snake.header == Point(6, 5)
    assert room.drain_operations() == []


def test_snake_hitting_barrier_becomes_food(setup):
    room, player, sends, gt = setup
    room.frame = 1
    place_snake(room, player, [Point(5, 5), Point(5, 4)], Direction.UP)
    room.game_items.add_barrier(Point(5, 6))
    gt.step()
    assert room.game_items.snakes == []
    assert [f.points for f in room.game_items.foods] == [[Point(5, 6)], [Point(5, 5)]]


def test_snake_eating_food_grows(setup):
    room, player, sends, gt = setup
    room.frame = 1
    snake = place_snake(room, player, [Point(5, 5), Point(5, 4)], Direction.UP)
    room.game_items.add_food(Point(5, 6))
    gt.step()
    assert len(snake.points) == 3
    assert snake.length == 20 + DEFAULT_GROWTH


def test_food_appears_on_first_frame(setup):
    room, player, sends, gt = setup
    gt.step()
    assert len(room.game_items.foods) == 1


def test_game_end_notifies_players(setup):
    room, player, sends, gt = setup
    gt.game_end()
    reply = sends.get_nowait()
    assert reply.code is ResponseCode.GAME_OVER
    assert reply.target_ids == (player.ws_id,)


def test_run_plays_until_last_frame(setup):
    room, player, sends, gt = setup
    room.game_all_frames = 3
    room.fresh_milliseconds = 0
    gt.run()
    replies = drain(sends)
    assert room.frame == 3
    assert room.state is RoomState.READYING
    assert [r.code for r in replies].count(ResponseCode.UPDATE) == 3
    assert replies[-1].code is ResponseCode.GAME_OVER


def test_start_and_join_through_room(setup):
    room, player, sends, gt = setup
    room.game_all_frames = 2
    room.fresh_milliseconds = 0
    room.game_thread = gt
    assert room.start_game(player) is True
    gt.join()
    assert room.state is RoomState.READYING
    assert room.frame == 2
    assert drain(sends)[-1].code is ResponseCode.GAME_OVER