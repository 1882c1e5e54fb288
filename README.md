# snakeserver

A multiplayer snake game server. Clients connect over a WebSocket, create
players, gather in rooms, get ready and play a shared game of snake on a
walled 25 × 25 board. The server runs a game loop for every room that is
playing and pushes the full game state to every player in the room on each
frame.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running

```
snakeserver
```

Options:

| option             | meaning                                              |
|--------------------|------------------------------------------------------|
| `--host HOST`      | address to listen on (default `0.0.0.0`)             |
| `--port PORT`      | port to listen on (default `1145`)                   |
| `--duration SECS`  | stop after this many seconds (default: until Ctrl-C) |
| `--verbose`        | log debug messages                                   |

The same entry point is `snakeserver.main.main(argv=None)`.

## Protocol

Every message a client sends is one JSON object:

```json
{
  "type": 2,
  "roomId": 0,
  "playerId": 0,
  "payload": {"type": 3, "data": {}}
}
```

`type` is `1` for a game operation and `2` for a room operation. `roomId`
and `playerId` default to `-1` when left out. A message that is not valid
JSON or lacks a required field is logged and dropped; the one exception is
the text `[object Object]`, which is answered with a failure reply.

Room operations (`payload.type`):

| value | operation     | `payload.data`      | also uses            |
|-------|---------------|---------------------|----------------------|
| 1     | create player | `{"name": "..."}`   |                      |
| 2     | remove player |                     | `playerId`           |
| 3     | create room   |                     | `playerId`           |
| 5     | join room     | `{"roomId": n}`     | `roomId`, `playerId` |
| 6     | leave room    |                     | `roomId`, `playerId` |
| 7     | ready         |                     | `playerId`           |
| 8     | unready       |                     | `playerId`           |
| 9     | start game    |                     | `roomId`, `playerId` |
| 10    | room info     | `{"roomId": n}`     |                      |
| 11    | server info   |                     |                      |
| 12    | player info   | `{"playerId": n}`   |                      |

Notes:

- *create player* replies with `{"plyerId": id}` (spelt that way).
- *create room* creates a room, puts the player in it and replies with
  `{"id": roomId}`. Join room takes the room from the top-level `roomId`.
- A player can only join a room when it is in none, can only be removed
  when it is in no room, and cannot leave a room while playing.
- Rooms with no players are removed automatically.

Game operations (`payload.type`) are sent with the top-level `roomId` of
the room and are applied at the start of the next frame:

| value | operation        | `payload.data`                                   |
|-------|------------------|--------------------------------------------------|
| 1     | change direction | `{"newDirection": 0..3}` (up, down, left, right) |
| 2     | spawn a snake    |                                                  |
| 3     | get game state   |                                                  |

Every reply has the form

```json
{"code": 1, "msg": "", "data": {}}
```

where `code` is `1` for success, `-1` for failure, `2` for a frame update
pushed during a game and `3` when the game is over.

## The game

A game starts when the first player in a room sends *start game* and every
player in the room is ready. The board gets a wall around its edge and each
player a two-segment snake at a random free spot, heading up (towards larger
`y`). The game lasts 3000 frames of 100 ms each. Every frame the snakes move,
a snake whose head hits a wall or another snake dies and turns into food,
and a snake whose head is on food grows by one segment. A new piece of food
appears every 500 frames.

## Using it as a library

The game pieces can be driven without any network:

```python
from snakeserver.room import Room
from snakeserver.player import Player

room = Room()
player = Player("dora", 1)
player.join_room(room)
room.add_player(player)
room.init_map(25, 25)
room.init_wall()
room.init_snakes()
print(room.game_json()["gameItems"]["snakes"])
print(room.board.render())
```

`snakeserver.board.Board.render()` draws a board as text, with `@` for
snakes, `*` for food, `#` for walls and `.` for empty cells.

`snakeserver.room_keeper.RoomKeeper` and `snakeserver.proxy.Proxy` talk to
each other through two `queue.Queue` objects: the proxy puts parsed
`ReceivedInfo` requests on the first, and sends every `SendInfo` taken from
the second. `RoomKeeper.process_pending()` handles whatever is waiting
without starting a thread.

## What it does not do

The server keeps everything in memory: players and rooms are lost when it
stops, there are no accounts or authentication, and no client is included.