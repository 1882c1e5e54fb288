"""Multiplayer snake game server: board, rooms, game loop and WebSocket proxy."""

__version__ = "0.1.0"

__all__ = ["__version__"]