"""
Command implementations for the Instagram migrator.

This module provides the main command execution logic.
"""

import logging
from typing import Optional

import click

from .config import MigratorConfig
from .exceptions import ConfigurationError, ExportFormatError
from .logger import setup_logging
from .migrator import MigrationStats, Migrator, estimate_import_time
from .upload import Uploader

logger = logging.getLogger(__name__)


def print_banner(config: MigratorConfig) -> None:
    """
    Print a banner with configuration information.

    Args:
        config: Migration configuration
    """
    click.echo()
    click.echo("=" * 70)
    click.echo("  Instagram to Bluesky Migrator")
    click.echo("=" * 70)
    click.echo(f"  Archive:        {config.archive_folder}")
    click.echo(f"  Min date:       {config.min_date.isoformat() if config.min_date else '-'}")
    click.echo(f"  Max date:       {config.max_date.isoformat() if config.max_date else '-'}")
    click.echo(f"  Concurrency:    {config.concurrency} posts")
    click.echo(f"  Upload delay:   {config.upload_delay}s")
    if config.plan_file:
        click.echo(f"  Plan file:      {config.plan_file}")

    if config.simulate:
        click.echo()
        click.echo("  SIMULATE MODE - Nothing will be posted")

    click.echo("=" * 70)
    click.echo()


def print_summary(stats: MigrationStats, config: MigratorConfig) -> None:
    """
    Print a final summary of the migration.

    Args:
        stats: Migration statistics
        config: Migration configuration
    """
    click.echo()
    click.echo("=" * 70)
    click.echo("  Migration Summary")
    click.echo("=" * 70)
    click.echo(f"  Posts found:    {stats.total_posts}")
    click.echo(f"  No date:        {stats.skipped_no_date}")
    click.echo(f"  Out of range:   {stats.skipped_out_of_range}")
    click.echo(f"  Failed:         {stats.failed_posts}")
    click.echo()
    click.echo(f"  Target posts:   {stats.target_posts}")
    click.echo(f"  Dropped:        {stats.dropped_posts}")
    click.echo(f"  Posted:         {stats.uploaded_posts}")
    click.echo(f"  Media:          {stats.uploaded_media}")
    click.echo(f"  Upload errors:  {stats.failed_uploads}")
    click.echo(f"  Duration:       {stats.duration_seconds:.2f}s")
    click.echo("=" * 70)

    click.echo()
    if config.simulate:
        click.echo("✓ Simulation completed successfully!")
        click.echo(
            "  Estimated time for real import: "
            f"{estimate_import_time(stats.uploaded_media, config.upload_delay)}"
        )
    elif stats.failed_uploads == 0:
        click.echo("✓ Migration completed successfully!")
    else:
        click.echo(f"⚠ Migration completed with {stats.failed_uploads} failed uploads")
        click.echo("  Check the logs for more details.")


async def run_migration(config: MigratorConfig, uploader: Optional[Uploader] = None) -> int:
    """
    Run the migration.

    This is the main command implementation that:
    - Sets up logging
    - Creates and runs the migrator
    - Displays results
    - Handles errors and interruptions

    Args:
        config: Migration configuration
        uploader: Destination for posts; simulate mode needs none

    Returns:
        Exit code (0 for success, 1 for error, 130 when interrupted)
    """
    setup_logging(verbose=config.verbose, log_file=config.log_file)

    print_banner(config)

    try:
        migrator = Migrator(config, uploader=uploader)
    except ConfigurationError as e:
        logger.error(f"Failed to initialize migrator: {e}")
        click.echo(f"Error: {e}", err=True)
        return 1

    stats: Optional[MigrationStats] = None
    exit_code = 0

    try:
        stats = await migrator.run()
        print_summary(stats, config)

        if stats.failed_uploads > 0 and stats.uploaded_posts == 0:
            exit_code = 1

    except KeyboardInterrupt:
        click.echo()
        click.echo()
        click.echo("⚠ Migration interrupted by user")

        stats = migrator._stats
        if stats:
            print_summary(stats, config)

        exit_code = 130

    except ExportFormatError as e:
        logger.error(f"Cannot read export: {e}")
        click.echo(f"Error: Cannot read export: {e}", err=True)
        exit_code = 1

    except Exception as e:
        logger.error(f"Migration failed: {e}", exc_info=config.verbose)
        click.echo()
        click.echo(f"Error: Migration failed: {e}", err=True)

        if not config.verbose:
            click.echo("Run with --verbose for more details or check the log file.")

        exit_code = 1

    return exit_code
