"""CLI entry point for Zen profile backups."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from zen_backup.core.config import AppConfig, load_config, resolve_config_path
from zen_backup.core.constants import ARCHIVE_KINDS, ENV_CONFIG_PATH
from zen_backup.core.errors import ConfigError
from zen_backup.core.models import ArchiveKind, FaultPlan, OperationResult, RetentionPolicy
from zen_backup.core.utils import format_size

logger = logging.getLogger(__name__)


def _config_path(ctx: click.Context) -> Path:
    override = ctx.obj.get("config_path")
    return Path(override) if override else resolve_config_path()


def _load(ctx: click.Context, required: bool = True) -> AppConfig | None:
    path = _config_path(ctx)
    logger.debug("Using configuration %s", path)
    try:
        return load_config(path, required=required)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(exc.exit_code) from None


def _report(result: OperationResult) -> None:
    """Print a service result and exit non-zero when it failed."""
    if result.summary:
        click.echo(result.summary)
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)
    for error in result.errors:
        click.echo(f"Error: {error}", err=True)
    if result.exit_code:
        raise SystemExit(result.exit_code)


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    envvar=ENV_CONFIG_PATH,
    type=click.Path(dir_okay=False),
    help="Path to settings.toml.",
)
@click.option("--debug", is_flag=True, default=False, help="Verbose diagnostic logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, debug: bool) -> None:
    """Zen profile backup -- snapshots, retention and restore."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("kind", type=click.Choice(ARCHIVE_KINDS, case_sensitive=False))
@click.pass_context
def backup(ctx: click.Context, kind: str) -> None:
    """Create a daily or weekly snapshot of the profile."""
    from zen_backup.core.services.snapshot import SnapshotService
    from zen_backup.runtime.liveness import EnvLiveness
    from zen_backup.storage.builder import SnapshotBuilder

    config = _load(ctx)
    builder = SnapshotBuilder(faults=FaultPlan.from_env(os.environ))
    service = SnapshotService(config, builder=builder, liveness=EnvLiveness())
    _report(service.build_snapshot(kind.lower()))


@cli.command()
@click.argument("archive")
@click.pass_context
def restore(ctx: click.Context, archive: str) -> None:
    """Restore the profile from ARCHIVE (path or file name)."""
    from zen_backup.core.services.restore import RestoreService
    from zen_backup.runtime.liveness import EnvLiveness

    config = _load(ctx)
    service = RestoreService(config, liveness=EnvLiveness())
    _report(service.restore(archive))


@cli.command(name="list")
@click.pass_context
def list_cmd(ctx: click.Context) -> None:
    """List archives in the local backup directory."""
    from zen_backup.core.services.inventory import list_archives

    config = _load(ctx)
    if not config.local_path.is_dir():
        click.echo(f"Error: backup directory not found: {config.local_path}", err=True)
        raise SystemExit(1)

    entries = list_archives(config.local_path)
    if not entries:
        click.echo("No backups found (empty backup directory).")
        return

    for kind in ArchiveKind:
        click.echo(f"{kind.value}:")
        for entry in entries:
            if entry.kind == kind:
                click.echo(f"  {entry.name} ({format_size(entry.size_bytes)})")


@cli.command()
@click.option("--today", default=None, help="Reference date for the health line (YYYY-MM-DD).")
@click.pass_context
def status(ctx: click.Context, today: str | None) -> None:
    """Show configuration, the latest archives, disk usage and health."""
    from zen_backup.core.services.inventory import (
        daily_health,
        directory_size,
        list_archives,
        newest_archive,
    )

    config = _load(ctx, required=False)
    if config is None:
        click.echo("Not installed")
        click.echo(f"Create {_config_path(ctx)} to configure backups.")
        return

    click.echo("Zen Profile Backup Status")
    click.echo(f"Profile path: {config.profile_path}")
    click.echo(f"Backup directory: {config.local_path}")
    if config.cloud_path:
        click.echo(f"Cloud sync: enabled ({config.cloud_path})")
    else:
        click.echo("Cloud sync: local only")
    click.echo(
        f"Retention: daily {config.daily_days} days, weekly {config.weekly_days} days"
    )
    schedule = config.schedule
    click.echo(
        f"Schedule: daily at {schedule.daily_time}, "
        f"weekly on {schedule.weekly_day} at {schedule.weekly_time}"
    )

    if not config.local_path.is_dir():
        click.echo("Backup directory not found. Run a backup or check configuration.")
        return

    entries = list_archives(config.local_path)
    for kind in ArchiveKind:
        latest = newest_archive(entries, kind)
        if latest:
            click.echo(f"Latest {kind.value}: {latest.name} ({format_size(latest.size_bytes)})")
        else:
            click.echo(f"No {kind.value} backups yet")

    daily_size = directory_size(config.local_path / ArchiveKind.DAILY.value)
    weekly_size = directory_size(config.local_path / ArchiveKind.WEEKLY.value)
    click.echo(f"Disk usage total: {format_size(daily_size + weekly_size)}")
    click.echo(f"Disk usage daily: {format_size(daily_size)}")
    click.echo(f"Disk usage weekly: {format_size(weekly_size)}")

    try:
        click.echo(daily_health(newest_archive(entries, ArchiveKind.DAILY), today))
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from None


@cli.command()
@click.argument("kind", type=click.Choice(ARCHIVE_KINDS, case_sensitive=False))
@click.option(
    "--root",
    "roots",
    multiple=True,
    type=click.Path(file_okay=False),
    help="Archive root to prune (repeatable). Defaults to the configured roots.",
)
@click.option("--today", default=None, help="Reference date (YYYY-MM-DD).")
@click.pass_context
def prune(ctx: click.Context, kind: str, roots: tuple[str, ...], today: str | None) -> None:
    """Delete KIND archives older than the configured retention."""
    from zen_backup.core.services.retention import apply_policy

    config = _load(ctx)
    kind = ArchiveKind(kind.lower())
    targets = [Path(root) for root in roots]
    if not targets:
        targets = [config.local_path]
        if config.cloud_path:
            targets.append(config.cloud_path)

    try:
        policy = RetentionPolicy(kind=kind, max_age_days=config.retention_days(kind))
        for root in targets:
            for path in apply_policy(root, policy, today):
                click.echo(f"Pruned: {path}")
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from None


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
