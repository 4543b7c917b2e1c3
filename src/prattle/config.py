"""TOML config loading for prattle.toml."""

from __future__ import annotations

import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

OUTPUT_FORMATS = ("tree", "inline")

# Each nesting level costs a few interpreter frames.
FRAMES_PER_LEVEL = 4


def max_depth_ceiling() -> int:
    """The deepest nesting the interpreter's recursion limit can support."""
    return sys.getrecursionlimit() // FRAMES_PER_LEVEL


def check_max_depth(depth: int) -> None:
    """Raise ValueError unless ``depth`` is in 1..max_depth_ceiling()."""
    ceiling = max_depth_ceiling()
    if not 1 <= depth <= ceiling:
        raise ValueError(f"max_depth must be between 1 and {ceiling}, got {depth}")


@dataclass
class ParseConfig:
    grammar: str = "arithmetic"
    max_depth: int = 200


@dataclass
class OutputConfig:
    color: bool = True
    format: str = "tree"


@dataclass
class PrattleConfig:
    parse: ParseConfig = field(default_factory=ParseConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find prattle.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / "prattle.toml"
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError("No prattle.toml found in any parent directory")
        path = parent


def load_config(path: Path) -> PrattleConfig:
    """Parse a prattle.toml file into a PrattleConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = PrattleConfig()

    if "parse" in data:
        prs = data["parse"]
        max_depth = int(prs.get("max_depth", 200))
        try:
            check_max_depth(max_depth)
        except ValueError as e:
            raise ValueError(f"{path}: parse.{e}") from None
        config.parse = ParseConfig(
            grammar=prs.get("grammar", "arithmetic"),
            max_depth=max_depth,
        )

    if "output" in data:
        out = data["output"]
        fmt = out.get("format", "tree")
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(
                f"{path}: output.format must be one of {', '.join(OUTPUT_FORMATS)}, got {fmt!r}"
            )
        config.output = OutputConfig(
            color=out.get("color", True),
            format=fmt,
        )

    return config


def discover_config(start_path: Path | None = None) -> PrattleConfig:
    """Load the nearest prattle.toml, or the defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return PrattleConfig()
