"""Command-line interface for Quire.

Commands:
- build: Build the site into the output directory.
- article: Create a new dated Markdown article.
"""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from pathlib import Path

import click
import questionary

from . import __version__
from .config import ConfigError, load_config
from .utils import slugify


@click.group()
@click.version_option(version=__version__, prog_name="quire")
def cli():
    """Quire static blog generator."""


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option("--url", "root_url", help="Site url (overrides quire.yaml)")
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (overrides quire.yaml output_dir)",
)
def build(drafts: bool, root_url: str | None, output: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import BuildError, build_site

    try:
        result = build_site(
            project_root,
            include_drafts=drafts,
            root_url=root_url,
            output_dir_override=output,
        )
    except ConfigError as exc:
        click.echo(click.style("Invalid configuration:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  {exc}", fg="white"), err=True)
        raise SystemExit(1) from None
    except BuildError as exc:
        try:
            rel_path = exc.source_path.relative_to(project_root)
        except ValueError:
            rel_path = exc.source_path
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from None
    click.echo(f"Built {len(result.written)} pages into {result.output_dir}")
    for name in result.feeds:
        click.echo(f"Wrote {name}")


@cli.command()
@click.argument("title", required=False)
@click.option(
    "--date",
    "date_str",
    help="Publication date as YYYY-MM-DD (defaults to today)",
)
@click.option("--tags", default="", help="Comma-separated tags")
def article(title: str | None, date_str: str | None, tags: str):
    """Create a new dated Markdown article."""
    project_root = Path.cwd()
    try:
        config = load_config(project_root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None
    source_dir = project_root / config.source_dir
    if not source_dir.exists():
        raise click.ClickException(
            f"No {config.source_dir}/ directory found. Run this command from a Quire project root."
        )

    if not title:
        title = questionary.text(
            "Article title:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if title is None:
            raise click.Abort()
    title = title.strip()

    if date_str:
        try:
            published = date_type.fromisoformat(date_str)
        except ValueError:
            raise click.BadParameter(
                f"Expected YYYY-MM-DD, got {date_str!r}", param_hint="--date"
            ) from None
    else:
        published = datetime.now(config.tz).date()

    filename = f"{published:%Y-%m-%d}-{slugify(title)}.md"
    target_path = source_dir / filename
    if target_path.exists():
        raise click.ClickException(
            f"File already exists: {target_path.relative_to(project_root)}"
        )

    lines = ["---", f'title: "{_yaml_escape(title)}"', f"date: {published:%Y-%m-%d}"]
    tag_list = [t.strip() for t in tags.split(",") if t.strip()]
    if tag_list:
        lines.append("tags: " + ", ".join(tag_list))
    lines.extend(["---", "", ""])
    target_path.write_text("\n".join(lines), encoding="utf-8")
    click.echo(f"Created {target_path.relative_to(project_root)}")


def _yaml_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
