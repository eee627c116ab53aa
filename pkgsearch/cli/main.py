"""Main CLI entry point for pkgsearch."""

import os
import sys
import logging
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from ..catalog.accessor import CatalogAccessor, CatalogLoader
from ..core.configuration import ConfigurationManager, default_config, DEFAULT_CONFIG_FILE
from ..core.engine import SearchEngine
from ..core.exceptions import PkgSearchError
from ..core.interfaces import OutputFormat, RenderedOutput, SearchSettings
from ..search.presenter import SearchPresenter
from ..search.query import build_query, normalize_query

# Rich consoles; results themselves bypass rich so stdout stays script-friendly
console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    # Check environment variable for log level override
    env_log_level = os.getenv('PKGSEARCH_LOG_LEVEL', '').upper()
    if env_log_level in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
        level = getattr(logging, env_log_level)
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    # Check environment variable for log format override
    log_format = os.getenv('PKGSEARCH_LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    logging.basicConfig(
        level=level,
        format=log_format,
        stream=sys.stderr,
        force=True
    )


def load_settings(ctx, **overrides) -> SearchSettings:
    """Load the effective settings for a command."""
    manager = ConfigurationManager(ctx.obj.get('config'))
    return manager.load(**overrides)


def report_error(ctx, error: Exception) -> None:
    """Print an error on stderr and exit with the matching status."""
    if isinstance(error, PkgSearchError):
        rendered = SearchPresenter().render_error(error)
        err_console.print(Text(rendered.stderr.rstrip("\n"), style="red"), soft_wrap=True)
        sys.exit(rendered.exit_code)

    err_console.print(Text(f"Unexpected error: {error}", style="red"), soft_wrap=True)
    if ctx.obj.get('verbose'):
        err_console.print_exception()
    sys.exit(1)


def emit(presenter: SearchPresenter, rendered: RenderedOutput) -> None:
    """Write rendered output to the process streams and exit on failure."""
    exit_code = presenter.write(rendered, sys.stdout, sys.stderr)
    if exit_code:
        sys.exit(exit_code)


# Global options that apply to all commands
@click.group()
@click.option('--config', '-c', type=click.Path(),
              default=lambda: os.getenv('PKGSEARCH_CONFIG'),
              help='Path to configuration file (env: PKGSEARCH_CONFIG)')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose logging (env: PKGSEARCH_VERBOSE)')
@click.pass_context
def cli(ctx, config, verbose):
    """
    Search a prebuilt package catalog.

    \b
    Examples:

      # Find every package whose name contains "hello"
      pkgsearch search hello

      # Restrict to a version; quote anything containing '>' or '<'
      pkgsearch search 'node@>=16'
      pkgsearch search 'hello@>1 <3' --json

      # Show the versions of one package
      pkgsearch show hello --all
    """
    ctx.ensure_object(dict)
    ctx.obj['config'] = config

    # Apply environment variable for verbose if not provided via CLI
    if not verbose and os.getenv('PKGSEARCH_VERBOSE', '').lower() in ['true', '1', 'yes']:
        verbose = True

    ctx.obj['verbose'] = verbose
    setup_logging(verbose)


@cli.command()
@click.argument('search_term', nargs=-1)
@click.option('--json', 'as_json', is_flag=True, help='Print search results as JSON')
@click.option('--catalog', default=None,
              help='Catalog file, directory or URL (env: PKGSEARCH_CATALOG)')
@click.option('--system', 'systems', multiple=True,
              help='Only show packages for this system; may be repeated (env: PKGSEARCH_SYSTEMS)')
@click.option('--strategy', type=click.Choice(['match', 'match-name']), default=None,
              help='Name matching strategy (env: PKGSEARCH_FEATURES_SEARCH_STRATEGY)')
@click.pass_context
def search(ctx, search_term, as_json, catalog, systems, strategy):
    """
    Search for packages to install.

    SEARCH_TERM has the form <name>[@<version>], where <version> is one of
    '1.2.3', '=1.2', '2.x', 'v2', '>=1' or a range such as '>1 <3'.

    \b
    Examples:

      pkgsearch search hello
      pkgsearch search hello@2.x
      pkgsearch search 'python3@>=3.10 <3.12' --json
    """
    try:
        # Reject malformed queries before configuration or catalog access
        normalize_query(search_term)

        settings = load_settings(ctx, catalog=catalog, systems=list(systems), search_strategy=strategy)
        output_format = OutputFormat.JSON if as_json else OutputFormat.TEXT
        query = build_query(search_term, settings.search_strategy, output_format)

        presenter = SearchPresenter(settings, interactive=sys.stdout.isatty())
        results = SearchEngine(settings).search(query)
        rendered = presenter.render(results, query)
        emit(presenter, rendered)
    except Exception as e:
        report_error(ctx, e)


@cli.command()
@click.argument('package')
@click.option('--all', 'show_all', is_flag=True, help='Show all available package versions')
@click.option('--catalog', default=None,
              help='Catalog file, directory or URL (env: PKGSEARCH_CATALOG)')
@click.option('--system', 'systems', multiple=True,
              help='Only show versions for this system; may be repeated')
@click.pass_context
def show(ctx, package, show_all, catalog, systems):
    """
    Show detailed package information.

    PACKAGE must be an exact package name, as printed by 'pkgsearch search',
    optionally prefixed with '<input>:'.
    """
    try:
        settings = load_settings(ctx, catalog=catalog, systems=list(systems))
        presenter = SearchPresenter(settings, interactive=sys.stdout.isatty())
        records = SearchEngine(settings).show(package)
        rendered = presenter.render_show(records, show_all=show_all)
        emit(presenter, rendered)
    except Exception as e:
        report_error(ctx, e)


def main() -> int:
    """Main CLI entry point."""
    try:
        cli(standalone_mode=False)
        return 0
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 130
    except SystemExit as e:
        return e.code
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        return 1


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--config-dir', type=click.Path(), default='~/.pkgsearch',
              help='Configuration directory')
@click.option('--catalog', default=None, help='Catalog file, directory or URL to record')
@click.option('--force', is_flag=True, help='Overwrite existing configuration')
@click.pass_context
def config_init(ctx, config_dir, catalog, force):
    """Initialize pkgsearch configuration."""
    try:
        config_path = Path(config_dir).expanduser()
        config_file = config_path / DEFAULT_CONFIG_FILE

        if config_file.exists() and not force:
            console.print(f"[yellow]Configuration already exists at {config_file}[/yellow]")
            console.print("Use --force to overwrite")
            return

        config_path.mkdir(parents=True, exist_ok=True)

        config_data = default_config()
        if catalog:
            config_data['catalog'] = catalog

        with open(config_file, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False, sort_keys=False)

        console.print(f"✅ Configuration initialized at [cyan]{config_file}[/cyan]")
        console.print("\nNext steps:")
        console.print("1. Point 'catalog' at your package catalog")
        console.print("2. Test the configuration:")
        console.print("   pkgsearch config validate")

    except Exception as e:
        err_console.print(f"[red]Error initializing configuration:[/red] {escape(str(e))}")
        sys.exit(1)


@config.command('show')
@click.pass_context
def config_show(ctx):
    """Show the effective configuration."""
    try:
        manager = ConfigurationManager(ctx.obj.get('config'))
        settings = manager.load()

        config_yaml = yaml.dump(manager.settings_as_dict(settings), default_flow_style=False, sort_keys=False)
        syntax = Syntax(config_yaml, "yaml", theme="monokai", line_numbers=True)
        console.print(Panel(syntax, title=f"Configuration: {manager.config_path}", border_style="blue"))

    except PkgSearchError as e:
        err_console.print(f"[red]Error reading configuration:[/red] {escape(str(e))}")
        sys.exit(1)


@config.command('validate')
@click.pass_context
def config_validate(ctx):
    """Validate the configuration and the configured catalog."""
    try:
        settings = load_settings(ctx)

        if not settings.catalog:
            console.print("[yellow]No catalog configured[/yellow]")
            sys.exit(1)

        loader = CatalogLoader(request_timeout=settings.request_timeout)
        with CatalogAccessor.open(settings.catalog, systems=settings.systems or None, loader=loader) as catalog:
            inputs = ", ".join(catalog.inputs) or "none"
            console.print(f"✅ Catalog [cyan]{settings.catalog}[/cyan]: {len(catalog)} records from inputs {inputs}")

    except PkgSearchError as e:
        err_console.print(f"[red]Configuration validation failed:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == '__main__':
    sys.exit(main())
