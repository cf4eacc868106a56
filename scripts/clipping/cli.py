"""
Command-line interface for the legal clipping service.

Provides commands for running the report, inspecting sections and filter
rules, and starting the web server with its scheduler.
"""

import asyncio
import logging
from typing import Optional

import click
from dotenv import load_dotenv

# Load environment variables from .env file (if it exists)
load_dotenv()

from . import __version__
from .config import config
from .services import get_aggregator, get_filter


def configure_logging(cfg) -> None:
    """Configure console logging from the ``logging`` config block."""
    level = getattr(logging, str(cfg.get("logging.level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=cfg.get("logging.format", "%(asctime)s - %(levelname)s - %(message)s"),
        handlers=[logging.StreamHandler()],
    )


configure_logging(config)
logger = logging.getLogger(__name__)


def setup_file_logging() -> None:
    """Set up file logging if enabled."""
    if config.get("logging.file_enabled", True):
        log_file = config.logs_dir / "clipping.log"
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(config.get("logging.format")))
        logging.getLogger().addHandler(file_handler)


@click.group()
@click.version_option(version=__version__, prog_name="clipping")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """Legal Clipping - daily procurement law intelligence report."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    setup_file_logging()


@cli.command()
@click.option("--no-send", is_flag=True, help="Save the report locally instead of emailing it")
@click.option("--print", "print_text", is_flag=True, help="Print the report text")
def run(no_send: bool, print_text: bool) -> None:
    """Build the report now (same pipeline as the scheduled job)."""
    aggregator = get_aggregator()
    report = asyncio.run(aggregator.run(deliver=not no_send))

    if report is None:
        click.echo(click.style("Report generation failed - see log", fg="red"))
        raise SystemExit(1)

    if no_send:
        path = aggregator.dispatcher.fallback(report.to_html(), report.generated_at)
        click.echo(click.style(f"Saved to {path}", fg="green"))

    if print_text:
        click.echo(report.document)

    failed = report.failed_sections
    click.echo(f"Sections: {len(report.sections)} ({len(failed)} failed)")
    if failed:
        click.echo(click.style(f"Failed: {', '.join(failed)}", fg="yellow"))
    if report.matched_rules:
        click.echo(click.style(f"Filters: {', '.join(report.matched_rules)}", fg="green"))


@cli.command("sections")
def list_sections() -> None:
    """List configured report sections in report order."""
    for i, section in enumerate(config.sections, 1):
        kind = section.get("type", "?")
        click.echo(f"{i:2}. [{kind:6}] {section.get('id')}: {section.get('label', '')}")


@cli.command()
@click.argument("text", required=False)
@click.option("-f", "--file", "path", type=click.Path(exists=True, dir_okay=False), help="Read text from a file")
def match(text: Optional[str], path: Optional[str]) -> None:
    """Show which filter rules match TEXT."""
    if path:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    if not text:
        raise click.UsageError("Provide TEXT or --file")

    result = get_filter().evaluate(text)
    if result.any_matched:
        click.echo(click.style(f"Matched: {result}", fg="green"))
    else:
        click.echo("No rules matched")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind")
@click.option("--port", default=3000, type=int, help="Port to bind")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def web(host: str, port: int, reload: bool) -> None:
    """Start the web server and scheduler."""
    try:
        import uvicorn
    except ImportError as err:
        click.echo(click.style("uvicorn not installed. Run: pip install -e .", fg="red"))
        raise SystemExit(1) from err

    click.echo(click.style(f"Starting clipping server at http://{host}:{port}", fg="green"))
    click.echo("/health | /run | /cache/clear")
    uvicorn.run("clipping.web.main:app", host=host, port=port, reload=reload)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
