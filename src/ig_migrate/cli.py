"""
Command-line interface for the Instagram to Bluesky migrator.
"""

import asyncio
import os
import sys
from pathlib import Path

import click

from ig_migrate import __version__
from ig_migrate.commands import run_migration
from ig_migrate.config import ConfigLoader, load_config
from ig_migrate.constants import DEFAULT_CONCURRENCY, DEFAULT_UPLOAD_DELAY
from ig_migrate.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="ig-migrate")
@click.pass_context
def main(ctx):
    """
    Instagram to Bluesky Migrator - Republish an Instagram export on Bluesky.

    Reads the posts of an extracted Instagram data export and splits them to
    fit Bluesky's limits (four images or one video per post), in
    chronological order. Runs are simulated: nothing is posted.
    """
    ctx.ensure_object(dict)


@main.command()
@click.option('--archive-folder', type=click.Path(file_okay=False),
              help='Root folder of the extracted Instagram export')
@click.option('--min-date',
              help='Skip posts created before this date (ISO-8601)')
@click.option('--max-date',
              help='Skip posts created on or after this date (ISO-8601)')
@click.option('--concurrency', type=int,
              help=f'Number of posts processed at once (default: {DEFAULT_CONCURRENCY})')
@click.option('--upload-delay', type=float,
              help=f'Seconds between uploads used for the time estimate (default: {DEFAULT_UPLOAD_DELAY})')
@click.option('--plan-file', type=click.Path(dir_okay=False),
              help='Write the list of target posts to this JSON file')
@click.option('--verbose', '-v', is_flag=True, default=False,
              help='Enable verbose logging output')
@click.option('--log-file', type=click.Path(dir_okay=False),
              help='Path to log file for persistent logging')
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='JSON or YAML configuration file')
def migrate(archive_folder, min_date, max_date, concurrency, upload_delay,
            plan_file, verbose, log_file, config_file):
    """
    Migrate posts from an Instagram export.

    Settings are read from the config file, then the environment (and .env),
    then the command line; later sources win.
    """
    cli_args = {
        'archive_folder': archive_folder,
        'min_date': min_date,
        'max_date': max_date,
        'concurrency': concurrency,
        'upload_delay': upload_delay,
        'plan_file': plan_file,
        'verbose': verbose or None,
        'log_file': log_file,
    }

    try:
        config = load_config(
            cli_args=cli_args,
            config_file=Path(config_file) if config_file else None,
        )
    except ConfigurationError as e:
        click.echo(f"❌ Configuration Error: {e}", err=True)
        sys.exit(1)

    if not config.simulate:
        click.echo(
            "❌ Configuration Error: publishing is not available from the command line; "
            "remove 'simulate: false' from the config file",
            err=True,
        )
        sys.exit(1)

    try:
        exit_code = asyncio.run(run_migration(config))
    except KeyboardInterrupt:
        click.echo("\n\n⚠️  Migration interrupted by user", err=True)
        sys.exit(130)

    sys.exit(exit_code)


@main.command()
@click.option('--verbose', '-v', is_flag=True, default=False,
              help='Show every environment variable checked')
def config(verbose):
    """
    Show current configuration.

    Displays configuration from environment variables and default values.
    """
    click.echo(f"\n{'='*60}")
    click.echo("Instagram Migrator Configuration")
    click.echo(f"{'='*60}\n")

    env_config = ConfigLoader.load_from_env(load_dotenv_file=True)

    click.echo("Settings:")

    defaults = {
        'archive_folder': None,
        'min_date': None,
        'max_date': None,
        'concurrency': DEFAULT_CONCURRENCY,
        'upload_delay': DEFAULT_UPLOAD_DELAY,
        'plan_file': None,
        'verbose': False,
        'log_file': None,
    }

    for key, default_value in defaults.items():
        env_value = env_config.get(key)
        if env_value is not None:
            click.echo(f"  {key}: {env_value} (from environment)")
        else:
            click.echo(f"  {key}: {default_value} (default)")

    if verbose:
        click.echo("\nEnvironment Variables Checked:")
        for env_var in sorted(ConfigLoader.ENV_VAR_MAPPING.keys()):
            value = os.getenv(env_var)
            if value:
                click.echo(f"  {env_var}: {value}")
            else:
                click.echo(f"  {env_var}: (not set)")

    click.echo("\nUsage:")
    click.echo("  Set environment variables in your shell or .env file")
    click.echo("  Example: export ARCHIVE_FOLDER=./instagram-export")
    click.echo(f"\n{'='*60}\n")


if __name__ == '__main__':
    main()
