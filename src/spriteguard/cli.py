"""Command-line interface for SpriteGuard.

Provides commands for validating and post-processing a synthesized
sprite against its base, inspecting sprite identity, producing
game-ready assets and mirrored pose sheets.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from spriteguard.assembler import compose_sprite_sheet, generate_poses
from spriteguard.config import DEFAULT_SETTINGS, ForgeSettings, load_settings
from spriteguard.errors import IdentityDriftError, SpriteGuardError
from spriteguard.executors import ImageFileExecutor
from spriteguard.extraction import detect_skeleton, extract_palette
from spriteguard.logging import setup_logging
from spriteguard.observability import ForgeMetricsCollector, write_run_summary
from spriteguard.pipeline import analyze_identity, forge_sprite, process_game_ready
from spriteguard.pixels import load_pixel_data, save_pixel_data

console = Console()

EXIT_IDENTITY_DRIFT = 2

_existing_file = click.Path(exists=True, dir_okay=False, path_type=Path)


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    setup_logging(level=logging.DEBUG if verbose else logging.INFO, verbose=verbose)


def _settings(config_path: Path | None) -> ForgeSettings:
    return load_settings(config_path) if config_path else DEFAULT_SETTINGS


@click.group()
@click.version_option(package_name="spriteguard")
def main() -> None:
    """SpriteGuard — identity-safe post-processing for AI-forged RPG sprites."""


@main.command()
@click.argument("base_image", type=_existing_file)
@click.argument("candidate", type=_existing_file)
@click.option("--outfit", required=True, help="Outfit the candidate was painted with")
@click.option("--class", "class_type", default="Adventurer", show_default=True)
@click.option("--theme", default="Neutral", show_default=True)
@click.option("--sheet", is_flag=True, help="Also assemble a mirrored pose sheet")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    required=True,
    help="Output path for the forged PNG",
)
@click.option(
    "--config",
    "config_path",
    type=_existing_file,
    help="YAML settings file with stage thresholds",
)
@click.option(
    "--summary",
    type=click.Path(path_type=Path),
    help="Write a JSON run summary to this path",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable detailed logging")
def forge(
    base_image: Path,
    candidate: Path,
    outfit: str,
    class_type: str,
    theme: str,
    sheet: bool,
    output: Path,
    config_path: Path | None,
    summary: Path | None,
    verbose: bool,
) -> None:
    """Validate and finish a synthesized CANDIDATE against BASE_IMAGE.

    The candidate is replayed as the synthesis result, audited for
    silhouette and pose drift, then harmonized, cleaned and outlined.

    Example:

        \b
        spriteguard forge hero.png hero_plate.png --outfit "plate armor" \\
            --class Paladin --theme "frozen citadel" -o out/hero_plate.png
    """
    _setup_logging(verbose)
    metrics = ForgeMetricsCollector()

    try:
        settings = _settings(config_path)
        base = load_pixel_data(base_image)
        result = asyncio.run(
            forge_sprite(
                base_image=base,
                outfit=outfit,
                class_type=class_type,
                theme=theme,
                executor=ImageFileExecutor(candidate),
                sheet_mode=sheet,
                settings=settings,
                metrics=metrics,
            )
        )
        save_pixel_data(result.image, output, result.metadata.as_text_chunks())
        console.print(f"[bold green]✓[/] Forged sprite saved: [bold]{output}[/]")
        console.print(f"  Identity: {result.identity}")
        console.print(f"  Drift score: {result.drift:.4f}")
    except IdentityDriftError as e:
        console.print(f"[bold red]✗[/] Candidate rejected: {e}")
        sys.exit(EXIT_IDENTITY_DRIFT)
    except (SpriteGuardError, OSError) as e:
        console.print(f"[bold red]✗[/] Forge failed: {e}")
        sys.exit(1)
    finally:
        metrics.finish()
        if summary is not None:
            write_run_summary(summary, metrics.snapshot())


@main.command()
@click.argument("image", type=_existing_file)
@click.option("--config", "config_path", type=_existing_file, help="YAML settings file")
def analyze(image: Path, config_path: Path | None) -> None:
    """Print identity hash, skeleton and anatomical ratios of IMAGE."""
    try:
        report = analyze_identity(load_pixel_data(image), _settings(config_path))
    except SpriteGuardError as e:
        console.print(f"[bold red]✗[/] Analysis failed: {e}")
        sys.exit(1)

    table = Table(title=f"Identity of {image.name}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Hash", report.hash)
    for name, (x, y) in report.skeleton.joints():
        table.add_row(f"Joint {name}", f"({x:.2f}, {y})")
    table.add_row("Head ratio", f"{report.ratios.head:.4f}")
    table.add_row("Bust ratio", f"{report.ratios.bust:.4f}")
    table.add_row("Hip ratio", f"{report.ratios.hip:.4f}")
    table.add_row("Edge pixels", str(report.edge_pixels))
    console.print(table)


@main.command(name="game-ready")
@click.argument("image", type=_existing_file)
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True)
@click.option(
    "--palette-from",
    type=_existing_file,
    help="Reference sprite whose palette the output is snapped to",
)
@click.option("--config", "config_path", type=_existing_file, help="YAML settings file")
def game_ready(
    image: Path,
    output: Path,
    palette_from: Path | None,
    config_path: Path | None,
) -> None:
    """Strip background and binarize alpha of a stored IMAGE.

    With ``--palette-from`` the result is snapped to the colors of the
    cleaned reference sprite.
    """
    try:
        settings = _settings(config_path)
        palette = None
        if palette_from:
            reference = process_game_ready(load_pixel_data(palette_from), None, settings)
            palette = extract_palette(reference)
        result = process_game_ready(load_pixel_data(image), palette, settings)
        save_pixel_data(result, output)
    except SpriteGuardError as e:
        console.print(f"[bold red]✗[/] Processing failed: {e}")
        sys.exit(1)
    console.print(f"[bold green]✓[/] Game-ready sprite saved: [bold]{output}[/]")


@main.command()
@click.argument("image", type=_existing_file)
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True)
def sheet(image: Path, output: Path) -> None:
    """Compose IMAGE and its mirror into a two-pose sprite sheet."""
    try:
        sprite = load_pixel_data(image)
        result = compose_sprite_sheet(generate_poses(sprite, detect_skeleton(sprite)))
        save_pixel_data(result, output)
    except SpriteGuardError as e:
        console.print(f"[bold red]✗[/] Sheet assembly failed: {e}")
        sys.exit(1)
    console.print(
        f"[bold green]✓[/] Sheet saved: [bold]{output}[/] "
        f"({result.width}x{result.height})"
    )
