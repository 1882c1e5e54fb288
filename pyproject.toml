[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "snakeserver"
version = "0.1.0"
description = "Multiplayer snake game server speaking JSON over WebSockets"
requires-python = ">=3.10"
keywords = ["snake", "game", "server", "websocket", "multiplayer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Arcade",
]
dependencies = [
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
snakeserver = "snakeserver.main:main"

[tool.hatch.build.targets.wheel]
packages = ["snakeserver"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
