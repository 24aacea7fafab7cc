"""
MMR Accumulator Command Line Interface

Provides commands that build an in-memory accumulator, print its root chain,
and generate and verify witnesses. Nothing is persisted between runs.
"""

import logging
import sys
from typing import Iterable, List, Optional

import click

from mmr_accumulator.config import Settings, get_settings
from mmr_accumulator.core import Accumulator, RootInfo, Witness, short_hex

# Configure click
CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])

logger = logging.getLogger(__name__)


# Helper functions
def format_structure(roots: Iterable[RootInfo], preview: int = 4, color: bool = False) -> str:
    """Render the root chain as ``<digest>: [size N] -> ... -> NULL``."""
    parts = []
    for root in roots:
        digest = short_hex(root.digest, preview)
        if color:
            digest = click.style(digest, fg='cyan')
        parts.append(f"{digest}: [size {root.weight}]")
    parts.append("NULL")
    return "Structure: " + " -> ".join(parts)


def print_structure(acc: Accumulator, settings: Settings) -> None:
    """Print the accumulator's current roots."""
    click.echo(format_structure(acc.roots(), settings.digest_preview_bytes, settings.color))


def add_elements(acc: Accumulator, elements: Iterable[str]) -> None:
    """Add each element (UTF-8 encoded), exiting on the first rejection."""
    for element in elements:
        if not acc.add(element.encode('utf-8')):
            click.echo(f"Error adding element: {element!r}", err=True)
            sys.exit(1)
        logger.debug("Added %r", element)


def describe(valid: bool, settings: Settings) -> str:
    text = "valid" if valid else "invalid"
    if settings.color:
        return click.style(text, fg='green' if valid else 'red', bold=True)
    return text


# Command group
@click.group(context_settings=CONTEXT_SETTINGS)
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Override MMR_LOG_LEVEL')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], no_color: bool):
    """MMR Accumulator - append-only set commitments with inclusion proofs."""
    settings = get_settings()
    updates = {}
    if log_level:
        updates['log_level'] = log_level
    if no_color:
        updates['color'] = False
    if updates:
        settings = Settings(**{**settings.model_dump(), **updates})

    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    ctx.obj = settings


@cli.command()
@click.option('--rounds', '-n', type=click.IntRange(min=1), help='Number of elements to add')
@click.pass_obj
def demo(settings: Settings, rounds: Optional[int]):
    """Add "1", "11", "111", ... and print the roots after every add."""
    rounds = rounds or settings.demo_rounds
    with Accumulator() as acc:
        element = ""
        for _ in range(rounds):
            element += "1"
            add_elements(acc, [element])
            click.echo()
            print_structure(acc, settings)
        click.echo()


@cli.command()
@click.argument('elements', nargs=-1, required=True)
@click.pass_obj
def roots(settings: Settings, elements: List[str]):
    """Add ELEMENTS and print the resulting root chain."""
    with Accumulator() as acc:
        add_elements(acc, elements)
        print_structure(acc, settings)
        click.echo(f"Leaves: {len(acc)}  Nodes: {acc.node_count}")


@cli.command()
@click.argument('elements', nargs=-1, required=True)
@click.option('--target', '-t', required=True, help='Element to prove')
@click.option('--extra', '-e', multiple=True, help='Element added after the witness is taken')
@click.pass_obj
def prove(settings: Settings, elements: List[str], target: str, extra: List[str]):
    """Add ELEMENTS, prove TARGET, then re-check after adding extras."""
    with Accumulator() as acc:
        add_elements(acc, elements)

        witness: Optional[Witness] = acc.witness(target.encode('utf-8'))
        if witness is None:
            click.echo(f"Element not found: {target!r}", err=True)
            sys.exit(1)

        click.echo("Witness:")
        click.echo(witness.model_dump_json(indent=2))
        click.echo(f"Witness is {describe(acc.verify(witness), settings)}")

        if extra:
            add_elements(acc, extra)
            print_structure(acc, settings)
            click.echo(f"Earlier witness is {describe(acc.verify(witness), settings)}")
            fresh = acc.witness(target.encode('utf-8'))
            click.echo(f"Fresh witness is {describe(fresh is not None and acc.verify(fresh), settings)}")


def main():
    cli()


# Main entry point
if __name__ == '__main__':
    main()
