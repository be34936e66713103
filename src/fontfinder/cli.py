"""
Font Finder CLI
===============

Command line front end: builds the font index, lists families and produces
previews.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from .core.config import FontFinderConfig
from .core.exceptions import ConfigurationError, FontFinderError, StorageError
from .core.models import FontFace, FontFamily, FontIndex
from .core.storage import ensure_directory
from .fonts.families import family_keywords, group_into_families, visible_families
from .fonts.index import FontIndexStore
from .preview.cancellation import CancellationSource
from .preview.queue import PreviewPriority, PreviewQueue
from .preview.resolver import PreviewResolver

# Setup logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

RETRY_HINT = "Check that the support directory is writable and try again."


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load_index(store: FontIndexStore) -> FontIndex:
    """Cached index, or a fresh one when missing or stale."""

    async def _run() -> FontIndex:
        index = await store.ensure_index()
        # A short-lived command waits for the refresh so it gets persisted
        if store.refresh_task is not None:
            refreshed = await store.refresh_task
            if refreshed is not None:
                return refreshed.index
        return index

    return asyncio.run(_run())


def _find_family(families: list[FontFamily], name: str) -> FontFamily | None:
    for family in families:
        if family.family_name == name:
            return family
    wanted = name.casefold()
    for family in families:
        if family.family_name.casefold() == wanted:
            return family
    return None


def _find_face(family: FontFamily, style: str | None) -> FontFace | None:
    if style is None:
        return family.representative
    wanted = style.strip().casefold()
    for face in family.faces:
        if face.style_name.casefold() == wanted:
            return face
    return None


def _prepare_cache_dirs(config: FontFinderConfig) -> None:
    for directory in (config.vector_cache_dir, config.raster_cache_dir, config.scratch_dir):
        ensure_directory(directory)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration YAML file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """Font Finder: index installed fonts and preview them."""
    try:
        config = FontFinderConfig.from_env_and_yaml(yaml_path=config_path)
    except ConfigurationError as e:
        _fail(str(e))

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(config.log_level)

    ctx.obj = config


@cli.command()
@click.pass_obj
def build(config):
    """Rebuild the font index from scratch."""
    store = FontIndexStore(config)
    try:
        result = asyncio.run(store.build())
    except StorageError as e:
        logger.exception(f"Index build failed: {e}")
        _fail(f"{e}. {RETRY_HINT}")

    stats = result.stats
    click.echo(f"Scanned files: {stats.scanned_files}")
    click.echo(f"Parsed faces:  {stats.parsed_faces}")
    click.echo(f"Skipped files: {stats.skipped_files}")
    click.echo(f"Index written to {store.index_path}")


@cli.command()
@click.pass_obj
def status(config):
    """Show the state of the cached font index."""
    store = FontIndexStore(config)
    index = store.load()

    click.echo(f"Index path: {store.index_path}")
    if index is None:
        click.echo("No usable index (run `font-finder build`)")
        return

    families = group_into_families(index.faces)
    click.echo(f"Built at:   {index.built_at}")
    click.echo(f"Faces:      {len(index.faces)}")
    click.echo(f"Families:   {len(families)}")
    click.echo(f"Stale:      {'yes' if store.is_stale(index) else 'no'}")


@cli.command()
@click.option("--include-hidden", is_flag=True, help="Include dot-prefixed system families")
@click.option("--json", "as_json", is_flag=True, help="Print families as JSON")
@click.pass_obj
def families(config, include_hidden, as_json):
    """List font families."""
    try:
        index = _load_index(FontIndexStore(config))
    except StorageError as e:
        _fail(f"{e}. {RETRY_HINT}")

    grouped = visible_families(group_into_families(index.faces), include_hidden=include_hidden)

    if as_json:
        payload = [
            {
                "id": family.id,
                "familyName": family.family_name,
                "representativeFaceId": family.representative_face_id,
                "styles": [face.style_name for face in family.faces],
                "keywords": family_keywords(family),
            }
            for family in grouped
        ]
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    for family in grouped:
        styles = ", ".join(face.style_name for face in family.faces)
        click.echo(f"{family.family_name} ({styles})")
    click.echo(f"{len(grouped)} families")


@cli.command()
@click.argument("family")
@click.option("--style", "-s", help="Style name (defaults to the representative face)")
@click.option("--size", type=click.IntRange(16, 4096), help="Raster thumbnail size in px")
@click.pass_obj
def preview(config, family, style, size):
    """Produce a preview for one face of FAMILY."""
    try:
        index = _load_index(FontIndexStore(config))
        _prepare_cache_dirs(config)
    except StorageError as e:
        _fail(f"{e}. {RETRY_HINT}")

    match = _find_family(group_into_families(index.faces), family)
    if match is None:
        _fail(f"Family not found: {family}")

    face = _find_face(match, style)
    if face is None:
        _fail(f"No style {style!r} in {match.family_name}")

    resolver = PreviewResolver.from_config(config)
    if size is not None:
        resolver.size = size

    published: dict[str, Path | None] = {}

    def _publish(resolved_face: FontFace, path: Path | None) -> None:
        published[resolved_face.id] = path

    handle = CancellationSource().new_handle()
    asyncio.run(resolver.resolve_for_selection(face, handle, _publish))

    path = published.get(face.id)
    if path is None:
        click.echo(f"Preview unavailable for {face.display_name}")
        return
    click.echo(str(path))


@cli.command()
@click.option("--concurrency", "-j", type=click.IntRange(1, 32), help="Concurrent previews")
@click.option("--include-hidden", is_flag=True, help="Include dot-prefixed system families")
@click.pass_obj
def warm(config, concurrency, include_hidden):
    """Generate previews for every family's representative face."""
    try:
        index = _load_index(FontIndexStore(config))
        _prepare_cache_dirs(config)
    except StorageError as e:
        _fail(f"{e}. {RETRY_HINT}")

    grouped = visible_families(group_into_families(index.faces), include_hidden=include_hidden)
    faces = [family.representative for family in grouped]
    resolver = PreviewResolver.from_config(config)

    async def _warm() -> dict[str, Path | None]:
        queue = PreviewQueue(
            resolver,
            faces,
            concurrency=concurrency or config.preview.concurrency,
        )
        queue.enqueue_many([face.id for face in faces], PreviewPriority.NORMAL)
        await queue.join()
        return queue.results

    try:
        results = asyncio.run(_warm())
    except FontFinderError as e:
        logger.exception(f"Preview warm-up failed: {e}")
        _fail(str(e))

    resolved = sum(1 for path in results.values() if path is not None)
    click.echo(f"Resolved {resolved} of {len(faces)} previews")


if __name__ == "__main__":
    cli()
