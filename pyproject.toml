[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "epsilon"
version = "0.1.0"
description = "A bitboard chess engine speaking the UCI protocol, with alpha-beta search and a magic-number search tool"
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "uci", "engine", "bitboard", "perft", "alpha-beta", "magic bitboards"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
epsilon = "epsilon.uci:main"
epsilon-magics = "epsilon.magics:main"

[tool.hatch.build.targets.wheel]
packages = ["epsilon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
