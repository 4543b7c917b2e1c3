"""prattle command line: parse text with one of the bundled grammars."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from prattle import __version__
from prattle.config import (
    OUTPUT_FORMATS,
    PrattleConfig,
    check_max_depth,
    discover_config,
    load_config,
)
from prattle.errors import DiagnosticRenderer, NestingTooDeepError, ParseError
from prattle.grammars import GRAMMARS, get_grammar
from prattle.node import Node


def _load(config_file: str | None) -> PrattleConfig:
    try:
        if config_file is not None:
            return load_config(Path(config_file))
        return discover_config()
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


def _dump_tree(nodes: list[Node], fmt: str) -> None:
    for node in nodes:
        if fmt == "inline":
            click.echo(str(node))
        else:
            click.echo(node.pretty())


@click.group()
@click.version_option(__version__, prog_name="prattle")
def main() -> None:
    """A configurable Pratt parser."""


@main.command()
@click.argument("text", required=False)
@click.option("-g", "--grammar", default=None, help="Grammar to parse with (see `prattle grammars`).")
@click.option("-f", "--file", "path", type=click.Path(exists=True, dir_okay=False),
              help="Read the input from a file instead of TEXT.")
@click.option("--max-depth", type=int, default=None, help="Override the nesting limit.")
@click.option("--format", "fmt", type=click.Choice(OUTPUT_FORMATS), default=None,
              help="Tree layout of the output.")
@click.option("--inline", is_flag=True, help="Shorthand for --format inline.")
@click.option("--no-color", is_flag=True, help="Render diagnostics without ANSI colors.")
@click.option("--trace", is_flag=True, help="Log every parsing step to stderr.")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False),
              help="Use this prattle.toml instead of searching for one.")
def parse(
    text: str | None,
    grammar: str | None,
    path: str | None,
    max_depth: int | None,
    fmt: str | None,
    inline: bool,
    no_color: bool,
    trace: bool,
    config_file: str | None,
) -> None:
    """Parse TEXT and print its tree."""
    if trace:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    config = _load(config_file)

    if path is not None:
        source = Path(path).read_text()
    elif text is not None:
        source = text
    else:
        click.echo("error: nothing to parse; pass TEXT or --file", err=True)
        raise SystemExit(1)

    try:
        chosen = get_grammar(grammar or config.parse.grammar)
    except KeyError as e:
        click.echo(f"error: {e.args[0]}", err=True)
        raise SystemExit(1)

    renderer = DiagnosticRenderer(color=config.output.color and not no_color)
    depth = max_depth if max_depth is not None else config.parse.max_depth
    try:
        check_max_depth(depth)
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)

    try:
        nodes = chosen.parse(source, max_depth=depth)
    except ParseError as e:
        click.echo(renderer.render(e.diagnostic(), source), err=True)
        raise SystemExit(1)
    except RecursionError:
        click.echo(renderer.render(NestingTooDeepError(depth).diagnostic(), source), err=True)
        raise SystemExit(1)

    _dump_tree(nodes, "inline" if inline else fmt or config.output.format)


@main.command()
def grammars() -> None:
    """List the bundled grammars."""
    width = max(len(name) for name in GRAMMARS)
    for name, grammar in GRAMMARS.items():
        click.echo(f"{name:<{width}}  {grammar.description}")
