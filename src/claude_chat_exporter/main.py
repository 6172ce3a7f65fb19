"""
Main CLI interface for the Claude chat exporter.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress
from rich.table import Table

from .exceptions import ExportError, NoMessagesFoundError
from .parser import ConversationParser
from .utils import generate_export_filename, truncate_text


console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _read_html(file_path: str) -> str:
    with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
        return f.read()


def _write_markdown(markdown: str, output_dir: Path, title: str,
                    when: datetime) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / generate_export_filename(title, when)
    path.write_text(markdown, encoding='utf-8')
    return path


@click.group()
@click.version_option(package_name='claude-chat-exporter')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """Claude chat exporter - Convert saved Claude chat pages into markdown."""
    _configure_logging(verbose)


@cli.command()
@click.argument('html_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False),
              help='Write markdown to this file')
@click.option('--output-dir', '-d', default='.',
              help='Directory for the generated file (default: current directory)')
@click.option('--title', help='Override the detected conversation title')
@click.option('--guess-languages', is_flag=True,
              help='Guess languages of unlabelled code blocks')
@click.option('--stdout', 'to_stdout', is_flag=True,
              help='Print markdown instead of writing a file')
def convert(html_file: str, output: Optional[str], output_dir: str, title: Optional[str],
            guess_languages: bool, to_stdout: bool):
    """Convert a saved Claude chat page to markdown."""

    try:
        html_content = _read_html(html_file)
    except OSError as e:
        console.print(f"[red]Error reading file: {e}[/red]")
        sys.exit(1)

    logger.debug("Read %d characters from %s", len(html_content), html_file)
    parser = ConversationParser(guess_languages=guess_languages)
    exported_at = datetime.now()

    try:
        parsed = parser.parse_html(html_content, title=title)
    except NoMessagesFoundError:
        console.print("[yellow]No conversation found. Is this a saved Claude chat page?[/yellow]")
        sys.exit(2)
    except ExportError as e:
        console.print(f"[red]Failed to parse: {e}[/red]")
        sys.exit(1)

    markdown = parser.generate_markdown(parsed, exported_at=exported_at)

    if to_stdout:
        click.echo(markdown, nl=False)
        return

    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(markdown, encoding='utf-8')
    else:
        path = _write_markdown(markdown, Path(output_dir), parsed.title, exported_at)

    console.print("[green]Successfully exported conversation![/green]")
    console.print(f"Saved to: {path}")
    console.print(f"Title: {parsed.title}")
    console.print(f"Messages: {len(parsed.messages)}")


@cli.command()
@click.argument('html_files', nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
@click.option('--output-dir', '-d', default='exports',
              help='Directory for generated files (default: exports)')
@click.option('--guess-languages', is_flag=True,
              help='Guess languages of unlabelled code blocks')
@click.option('--continue-on-error', is_flag=True,
              help='Continue processing other files if one fails')
def batch(html_files: Tuple[str, ...], output_dir: str, guess_languages: bool,
          continue_on_error: bool):
    """Convert multiple saved Claude chat pages."""

    parser = ConversationParser(guess_languages=guess_languages)
    out_dir = Path(output_dir)

    success_count = 0
    error_count = 0

    with Progress(console=console) as progress:
        task = progress.add_task("Converting files...", total=len(html_files))

        for i, html_file in enumerate(html_files):
            name = Path(html_file).name
            progress.update(task, description=f"Converting {i+1}/{len(html_files)}: {name}")

            try:
                parsed = parser.parse_html(_read_html(html_file))
                exported_at = datetime.now()
                markdown = parser.generate_markdown(parsed, exported_at=exported_at)
                path = _write_markdown(markdown, out_dir, parsed.title, exported_at)
                console.print(f"[green]Saved: {path.name}[/green]")
                success_count += 1
            except (ExportError, OSError) as e:
                console.print(f"[red]Failed {name}: {e}[/red]")
                error_count += 1
                if not continue_on_error:
                    break

            progress.advance(task)

    console.print(f"\nResults: {success_count} successful, {error_count} failed")
    if error_count:
        sys.exit(1)


@cli.command()
@click.argument('html_file', type=click.Path(exists=True, dir_okay=False))
def inspect(html_file: str):
    """List the messages detected in a saved Claude chat page."""

    parser = ConversationParser()
    try:
        parsed = parser.parse_html(_read_html(html_file))
    except NoMessagesFoundError:
        console.print("[yellow]No conversation found[/yellow]")
        sys.exit(2)
    except ExportError as e:
        console.print(f"[red]Failed to parse: {e}[/red]")
        sys.exit(1)

    table = Table(title=parsed.title)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Position", justify="right", style="blue")
    table.add_column("Fingerprint", style="magenta", no_wrap=True)
    table.add_column("Reasoning", style="yellow")
    table.add_column("Chars", justify="right")
    table.add_column("Preview")

    for i, message in enumerate(parsed.messages, 1):
        if message.reasoning is None:
            reasoning = '-'
        else:
            reasoning = message.reasoning.time or 'yes'
        table.add_row(
            str(i),
            message.kind.heading,
            str(message.position),
            message.fingerprint[:8],
            reasoning,
            str(len(message.content)),
            truncate_text(message.content.replace('\n', ' '), 50),
        )

    console.print(table)


if __name__ == "__main__":
    cli()
