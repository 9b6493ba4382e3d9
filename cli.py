"""Command-line interface"""

import asyncio
from pathlib import Path
from typing import Optional

import click

from config import configure_logging, settings
from core.enums import SnapshotType
from core.exceptions import DumpkitError
from db import MySQLClient, check_connection
from operations import Restorer, Snapshotter, drop_databases
from orchestrator import Orchestrator
from ui.progress import ConsoleProgress
from utils.exclusions import load_exclusions
from utils.files import (
    database_name_from_file, delete_dumps, discover_dump_files, format_file_age,
    format_file_size, rename_dump, replace_dump
)


def get_client() -> MySQLClient:
    """Initialize the engine client from settings"""
    try:
        return MySQLClient.from_settings(settings)
    except DumpkitError as e:
        raise click.ClickException(str(e))


def parse_restore_targets(values) -> dict[str, str]:
    """FILE=DATABASE pairs"""
    targets = {}
    for value in values:
        file_path, sep, database = value.partition("=")
        if not sep or not file_path or not database:
            raise click.BadParameter(f"expected FILE=DATABASE, got {value!r}", param_hint="--restore")
        targets[str(Path(file_path))] = database
    return targets


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def cli(verbose: bool):
    """Manage MySQL dump files: slim dumps, restores and snapshots"""
    configure_logging("DEBUG" if verbose else None)


@cli.command()
@click.argument('files', nargs=-1, type=click.Path(path_type=Path))
@click.option('--all', 'process_all', is_flag=True, help='Process every dump in the full directory')
@click.option('--restore', 'restores', multiple=True, metavar='FILE=DATABASE',
              help='Restore the slim dump of FILE into DATABASE')
@click.option('--exclude-file', type=click.Path(path_type=Path), default=None,
              help='Exclusion list (default from settings)')
@click.option('--output-dir', type=click.Path(path_type=Path), default=None,
              help='Where slim dumps are written')
def slim(files, process_all: bool, restores, exclude_file, output_dir):
    """Create slim dumps from full dumps"""
    paths = [str(p) for p in files]
    if process_all:
        paths.extend(f.path for f in discover_dump_files(settings.resolve(settings.FULL_DIR)))
    if not paths:
        raise click.UsageError("No dump files given (pass FILES or --all)")

    targets = parse_restore_targets(restores)

    async def _slim():
        orchestrator = Orchestrator(
            get_client(),
            progress=ConsoleProgress(),
            policy=settings.get_progress_policy(),
            workspace_suffix=settings.WORKSPACE_SUFFIX,
            slim_suffix=settings.SLIM_SUFFIX,
        )
        request = Orchestrator.build_request(
            paths,
            output_dir or settings.get_output_path(settings.SLIM_DIR),
            exclusions_path=exclude_file or settings.get_exclusions_path(),
            restore_targets=targets,
        )
        return await orchestrator.run(request)

    try:
        batch = asyncio.run(_slim())
    except DumpkitError as e:
        raise click.ClickException(str(e))

    click.echo("")
    for result in batch.results:
        if result.success:
            click.echo(f"✓ {result.file_name}: {result.full_size_text} → {result.slim_size_text} "
                       f"({result.savings}% smaller)")
            click.echo(f"  Saved to: {result.output_path}")
            if result.restore:
                click.echo(f"  Restored to {result.restore.database_name}: "
                           f"{result.restore.table_count} tables, {result.restore.size_mb} MB")
            elif result.restore_error:
                click.echo(f"  Restore failed: {result.restore_error}", err=True)
        else:
            click.echo(f"✗ {result.file_name}: {result.error}", err=True)

    click.echo(f"\n{batch.succeeded} succeeded, {batch.failed} failed")
    if batch.partial_failure:
        raise SystemExit(1)


@cli.command()
@click.argument('file', type=click.Path(path_type=Path))
@click.argument('database', required=False)
def restore(file: Path, database: Optional[str]):
    """Restore a dump FILE into DATABASE (drops it first)

    DATABASE defaults to the file name without its .sql and slim suffixes.
    """
    database = database or database_name_from_file(file, settings.SLIM_SUFFIX)

    async def _restore():
        restorer = Restorer(get_client(), ConsoleProgress(), settings.get_progress_policy())
        return await restorer.restore(str(file), database)

    try:
        summary = asyncio.run(_restore())
    except (DumpkitError, OSError) as e:
        raise click.ClickException(f"Restore failed: {e}")

    click.echo(f"✓ Database '{summary.database_name}' restored successfully!")
    click.echo(f"  Total tables: {summary.table_count}")
    click.echo(f"  Database size: {summary.size_mb} MB")


@cli.command()
@click.argument('database')
@click.option('--description', '-d', prompt=True, help='Snapshot description')
@click.option('--slim', 'slim_snapshot', is_flag=True, help='Leave out data of excluded tables')
def snapshot(database: str, description: str, slim_snapshot: bool):
    """Export DATABASE to the snapshots directory"""
    async def _snapshot():
        snapshotter = Snapshotter(get_client(), ConsoleProgress(), settings.get_progress_policy())
        exclusions = load_exclusions(settings.get_exclusions_path()) if slim_snapshot else None
        return await snapshotter.snapshot(
            database,
            description,
            settings.get_output_path(settings.SNAPSHOT_DIR),
            SnapshotType.SLIM if slim_snapshot else SnapshotType.FULL,
            exclusions,
        )

    try:
        result = asyncio.run(_snapshot())
    except (DumpkitError, OSError) as e:
        raise click.ClickException(f"Snapshot failed: {e}")

    click.echo("✓ Snapshot created successfully!")
    click.echo(f"  Location: {result.file_path}")
    click.echo(f"  Size: {result.size_text}")
    click.echo(f"  Tables: {result.table_count}")
    click.echo(f"  Type: {result.type.value}")


@cli.command()
def databases():
    """List databases with table counts and sizes"""
    async def _databases():
        client = get_client()
        names = await client.list_databases()
        return [(name, await client.database_info(name)) for name in names]

    try:
        rows = asyncio.run(_databases())
    except DumpkitError as e:
        raise click.ClickException(str(e))

    for name, info in rows:
        click.echo(f"{name}  ({info.table_count} tables, {info.size_mb} MB)")


@cli.command()
@click.argument('names', nargs=-1, required=True)
@click.confirmation_option(prompt='Drop the selected databases?')
def drop(names):
    """Drop one or more databases"""
    result = asyncio.run(drop_databases(get_client(), names))
    for name in result.deleted:
        click.echo(f"✓ Dropped {name}")
    for error in result.errors:
        click.echo(f"✗ {error.database}: {error.error}", err=True)
    if result.errors:
        raise SystemExit(1)


@cli.command()
def dumps():
    """List full, slim and snapshot dumps"""
    for label, subdir in (("Full", settings.FULL_DIR), ("Slim", settings.SLIM_DIR),
                          ("Snapshots", settings.SNAPSHOT_DIR)):
        files = discover_dump_files(settings.resolve(subdir))
        if not files:
            continue
        click.echo(f"─── {label} ───")
        for f in files:
            click.echo(f"  {f.name}  ({format_file_size(f.size_bytes)}, {format_file_age(f.modified)})")


@cli.command()
@click.argument('file', type=click.Path(path_type=Path))
@click.argument('new_name')
def rename(file: Path, new_name: str):
    """Rename a dump FILE to NEW_NAME.sql in the same directory"""
    try:
        target = rename_dump(file, new_name)
    except (DumpkitError, OSError) as e:
        raise click.ClickException(f"Rename failed: {e}")
    click.echo(f"✓ Renamed {file.name} → {target.name}")


@cli.command()
@click.argument('source', type=click.Path(path_type=Path))
@click.argument('target', type=click.Path(path_type=Path))
@click.confirmation_option(prompt='The target file will be overwritten. Continue?')
def replace(source: Path, target: Path):
    """Overwrite dump TARGET with a copy of SOURCE"""
    try:
        dump = replace_dump(source, target)
    except (DumpkitError, OSError) as e:
        raise click.ClickException(f"Replace failed: {e}")
    click.echo(f"✓ Replaced {dump.path} ({format_file_size(dump.size_bytes)})")
    click.echo(f"  Source kept at: {source}")


@cli.command()
@click.argument('files', nargs=-1, required=True, type=click.Path(path_type=Path))
@click.confirmation_option(prompt='Permanently delete the selected files?')
def delete(files):
    """Delete dump FILES"""
    try:
        count = delete_dumps(files)
    except (DumpkitError, OSError) as e:
        raise click.ClickException(f"Delete failed: {e}")
    click.echo(f"✓ Deleted {count} file(s)")

@cli.command()
def check():
    """Test the database connection"""
    status = asyncio.run(check_connection(get_client()))
    if not status["success"]:
        raise click.ClickException(f"Cannot connect to MySQL: {status['error']}")
    click.echo(f"✓ Connected via {status['type']} as {status['user']}")
