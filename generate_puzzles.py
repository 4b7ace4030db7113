#!/usr/bin/env python3
"""
Generate the fruit machine puzzle catalog.

Usage:
    python3 generate_puzzles.py --count 10 --seed 7 --out fruitmachine/games/fruit/static/puzzles.json

- Draws random number dials until `count` unique-solution puzzles are found.
- Re-verifies every puzzle over the full dial space before writing.
- Exits 1 on a shortfall or a failed verification (nothing is written on failure).
"""
from __future__ import annotations
import logging
import random
import sys
from pathlib import Path

import click

from fruitmachine.games.fruit.logic.generator import (
    ACCESSIBLE_MAX,
    MAX_DRAWS,
    GenerationError,
    generate_catalog,
)
from fruitmachine.games.fruit.puzzle_store import DEFAULT_CATALOG, write_catalog


@click.command()
@click.option("--count", default=5, show_default=True, help="Puzzles to generate.")
@click.option("--seed", type=int, default=None, help="Seed for reproducible catalogs.")
@click.option("--accessible-max", default=ACCESSIBLE_MAX, show_default=True,
              help="Targets at or below this are preferred.")
@click.option("--max-draws", default=MAX_DRAWS, show_default=True, help="Dial-set draws before giving up.")
@click.option("--out", "out_path", type=click.Path(dir_okay=False, path_type=Path),
              default=DEFAULT_CATALOG, show_default=True)
@click.option("-v", "--verbose", is_flag=True, help="Log every accepted puzzle.")
def main(count, seed, accessible_max, max_draws, out_path, verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        report = generate_catalog(
            count,
            rng=random.Random(seed),
            accessible_max=accessible_max,
            max_draws=max_draws,
        )
    except GenerationError as e:
        click.echo(f"Verification FAILED: {e}", err=True)
        sys.exit(1)

    if report.shortfall:
        click.echo(f"Only generated {len(report.puzzles)}/{count} puzzles after {report.draws} draws.", err=True)
        sys.exit(1)

    write_catalog(report.puzzles, out_path)
    click.echo(f"Wrote {len(report.puzzles)} puzzles to {out_path} ({report.draws} draws)")


if __name__ == "__main__":
    main()
