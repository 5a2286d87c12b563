# File: src/doc_archive/cli.py

"""
Module: cli.py (Main Project CLI Entry Point)

Description:
Provides the command-line interface for doc-archive using Typer. Commands
download a package's documentation, list its files, fetch one document by
keyword, export everything as one markdown document, and manage archived
packages. Command output goes to stdout; logs and error messages go to stderr.

Third-Party Documentation:
- Typer: https://typer.tiangolo.com/
- Loguru: https://loguru.readthedocs.io/

Sample Input/Output:
Input (Command Line):
  doc-archive download sqlmodel https://sqlmodel.tiangolo.com/
  doc-archive fetch sqlmodel "many-to-many"
  doc-archive export sqlmodel sqlmodel-docs.md
Output (Expected):
  - Markdown stored under './sqlmodel/markdown/', manifest at './manifest.json'.
  - The best matching document printed to stdout.
  - All documents concatenated into 'sqlmodel-docs.md'.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import typer
from loguru import logger

from .config import MANIFEST_FILENAME, Settings, configure_logging, load_settings
from .downloader import Html2TextConverter, HttpxFetcher, download_package
from .errors import DocArchiveError, InvalidArguments
from .exporter import export_package
from .manifest import ManifestStore
from .query import MAX_LISTED_MATCHES, find
from .utils import require_http_url, sanitize_package_name

# --- Typer App Initialization ---
app = typer.Typer(
    name="doc-archive",
    help="Download documentation as markdown, then list, search and export it.",
    add_completion=False,
    no_args_is_help=True,
)

logger_cli = logger.bind(name="cli")


@dataclass
class AppState:
    settings: Settings
    docs_root: Path
    store: ManifestStore


def build_fetcher() -> HttpxFetcher:
    return HttpxFetcher()


def _fail(message: str) -> NoReturn:
    typer.echo(f"❌ {message}", err=True)
    raise typer.Exit(code=1)


def _require(value: Optional[str], usage: str) -> str:
    if value is None or not value.strip():
        raise InvalidArguments(f"Usage: doc-archive {usage}")
    return value.strip()


@app.callback()
def main(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        "-r",
        help="Docs root holding manifest.json and package directories (default: config DOCS_ROOT).",
        file_okay=False,
        dir_okay=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Shared setup: logging, settings and the manifest store."""
    configure_logging("DEBUG" if verbose else "INFO")
    settings = load_settings()
    if not verbose and settings.log_level != "INFO":
        configure_logging(settings.log_level)

    docs_root = root.expanduser().resolve() if root else settings.docs_root
    ctx.obj = AppState(
        settings=settings,
        docs_root=docs_root,
        store=ManifestStore(docs_root / MANIFEST_FILENAME),
    )
    logger_cli.debug(f"Using docs root {docs_root}")


@app.command("download", help="Download docs and update the manifest.")
def download_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Package name (used as directory name).", metavar="NAME"),
    url: str = typer.Argument(..., help="Documentation URL.", metavar="URL"),
    depth: Optional[int] = typer.Option(
        None, "--depth", "-d", min=0, help="Max crawl depth when no llms.txt exists."
    ),
):
    state: AppState = ctx.obj
    settings = state.settings
    try:
        name = sanitize_package_name(_require(name, "download <name> <url>"))
        url = require_http_url(_require(url, "download <name> <url>"))
        state.docs_root.mkdir(parents=True, exist_ok=True)

        typer.echo(f"📥 Downloading {name} from {url}...", err=True)
        with build_fetcher() as fetcher:
            package = download_package(
                name=name,
                url=url,
                docs_root=state.docs_root,
                store=state.store,
                fetcher=fetcher,
                converter=Html2TextConverter(),
                depth=settings.crawl_depth if depth is None else depth,
                probe_timeout=settings.probe_timeout,
                request_timeout=settings.timeout_requests,
                show_progress=True,
            )
    except DocArchiveError as e:
        _fail(str(e))
    except OSError as e:
        logger_cli.exception("Download failed")
        _fail(f"Download failed: {e}")

    typer.echo(
        f"✅ {package.name}: {package.file_count} file(s) indexed via {package.method}"
    )
    typer.echo(f"📋 List: doc-archive list {package.name}")


@app.command("list", help="List all docs of a package with titles and URLs.")
def list_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Package name.", metavar="NAME"),
):
    state: AppState = ctx.obj
    try:
        package = state.store.get(_require(name, "list <name>"))
    except DocArchiveError as e:
        _fail(str(e))

    typer.echo(f"📚 {package.name} ({package.file_count} docs)")
    typer.echo()
    for record in package.files:
        typer.echo(f"• {record.path}")
        if record.title:
            typer.echo(f"  {record.title}")
        typer.echo(f"  🔗 {record.url}")
        typer.echo()


@app.command("fetch", help="Print the doc best matching a keyword.")
def fetch_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Package name.", metavar="NAME"),
    keyword: str = typer.Argument(..., help="Keyword matched against path, title, then content.", metavar="KEYWORD"),
):
    state: AppState = ctx.obj
    try:
        name = _require(name, "fetch <name> <keyword>")
        # Surrounding spaces are part of the keyword.
        _require(keyword, "fetch <name> <keyword>")
        matches = find(state.store, name, keyword)
    except DocArchiveError as e:
        _fail(str(e))

    if not matches:
        _fail(f"No matches for '{keyword}'")

    if len(matches) > 1:
        typer.echo(f"📋 Found {len(matches)} matches (showing most relevant):")
        typer.echo()
        for i, match in enumerate(matches[:MAX_LISTED_MATCHES], 1):
            typer.echo(f"{i}) {match.path}")
        typer.echo()
        typer.echo("Showing first match:")
        typer.echo()

    top = matches[0]
    path = state.store.resolve(top)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        _fail(f"Cannot read {path}: {e}")

    typer.echo(f"✅ {top.path}")
    typer.echo(f"🔗 {top.url}")
    typer.echo()
    typer.echo("─" * 60)
    typer.echo()
    typer.echo(content)


@app.command("export", help="Export all markdown of a package as one document.")
def export_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Package name.", metavar="NAME"),
    output: Optional[Path] = typer.Argument(
        None, help="Output file (default: stdout).", metavar="[OUTPUT]", dir_okay=False
    ),
    provenance: bool = typer.Option(
        True, "--provenance/--no-provenance", help="Prefix each file with its path and URL."
    ),
):
    state: AppState = ctx.obj
    try:
        document = export_package(
            state.store,
            _require(name, "export <name> [output]"),
            output=output,
            provenance=provenance,
        )
    except DocArchiveError as e:
        _fail(str(e))

    if output is None:
        typer.echo(document, nl=False)
    else:
        typer.echo(f"✅ Exported to {output}", err=True)


@app.command("packages", help="List every archived package.")
def packages_command(ctx: typer.Context):
    state: AppState = ctx.obj
    packages = state.store.list_packages()
    if not packages:
        typer.echo("No packages downloaded yet.")
        return
    for package in packages:
        typer.echo(f"• {package.name} [{package.method}] {package.file_count} docs")
        typer.echo(f"  🔗 {package.url}")


@app.command("remove", help="Remove a package from the manifest and delete its files.")
def remove_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Package name.", metavar="NAME"),
    keep_files: bool = typer.Option(False, "--keep-files", help="Only drop the manifest entry."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    state: AppState = ctx.obj
    try:
        name = _require(name, "remove <name>")
        state.store.get(name)
        package_dir = state.docs_root / name
        delete_files = not keep_files and package_dir.is_dir()
        if not yes:
            what = f"'{name}' and {package_dir}" if delete_files else f"'{name}'"
            typer.confirm(f"Remove {what}?", abort=True)
        state.store.remove(name)
    except DocArchiveError as e:
        _fail(str(e))

    if delete_files:
        shutil.rmtree(package_dir)
        logger_cli.info(f"Deleted {package_dir}")
    typer.echo(f"🗑️  Removed {name}")


if __name__ == "__main__":
    app()
