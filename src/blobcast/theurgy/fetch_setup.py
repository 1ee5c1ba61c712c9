"""
Theurgy Fetch Setup - Download the KZG trusted setup.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
import httpx

from ..kzg import TrustedSetupError
from ..kzg.trusted_setup import CACHED_SETUP, TRUSTED_SETUP_URL, fetch_trusted_setup, read_trusted_setup


@click.command("fetch-setup")
@click.option("--url", default=TRUSTED_SETUP_URL, show_default=True, help="Trusted setup source")
@click.option("--dest", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help=f"Target file (default: {CACHED_SETUP})")
@click.option("--force", is_flag=True, help="Download even if the file exists")
def fetch_setup(url: str, dest: Optional[Path], force: bool) -> None:
    """Download and validate the c-kzg trusted setup."""
    target = dest or CACHED_SETUP
    if target.is_file() and not force:
        click.echo(f"Trusted setup already present: {target}")
        click.echo("Use --force to download again.")
        return

    click.echo(f"Downloading {url}...")
    try:
        path = fetch_trusted_setup(url, target, force=force)
        setup = read_trusted_setup(path)
    except httpx.HTTPError as exc:
        click.secho(f"Download failed: {exc}", fg="red")
        sys.exit(1)
    except TrustedSetupError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    click.secho(f"Saved to {path}", fg="green")
    click.echo(f"  G1 points: {len(setup.g1_lagrange)}")
    click.echo(f"  G2 points: {len(setup.g2_monomial)}")
