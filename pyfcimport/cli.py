"""CLI interface for loading a directory tree into a repository."""

import logging
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from .api import RepositoryClient
from .config import (
    DEFAULT_FORMATS_FILE,
    DEFAULT_PREFIX_FILE,
    DEFAULT_RESOURCES_DIR,
    DEFAULT_URL,
    FORMATS_FILE_ENV,
    PASSWORD_ENV,
    PREFIX_FILE_ENV,
    RESOURCES_DIR_ENV,
    URL_ENV,
    USER_ENV,
    build_auth_header,
    load_allowed_binary_formats,
    load_prefix_file,
    normalize_base_url,
)
from .exceptions import ConfigError, ResourceReadError
from .finder import ResourceFinder
from .modes import TraversalMode

logger = logging.getLogger(__name__)

MODE_CHOICES = {
    "both": (TraversalMode.CREATE, TraversalMode.UPDATE),
    "create": (TraversalMode.CREATE,),
    "update": (TraversalMode.UPDATE,),
}


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyfcimport").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)


def run_passes(
    finder: ResourceFinder,
    modes: tuple[TraversalMode, ...],
    show_progress: bool = True,
) -> None:
    """Run each pass in order, with a spinner naming the current upload."""
    if not show_progress:
        for mode in modes:
            finder.run(mode)
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=Console(stderr=True),
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning...", total=None)

        def on_upload(label: str, identifier: str) -> None:
            progress.update(task, description=f"{label} {identifier or '/'}")

        finder.progress_callback = on_upload
        try:
            for mode in modes:
                progress.update(task, description=f"Starting {mode.value} pass")
                finder.run(mode)
        finally:
            finder.progress_callback = None


@click.command()
@click.option(
    "--url",
    "-u",
    envvar=URL_ENV,
    default=DEFAULT_URL,
    show_default=True,
    help="Repository base URL",
)
@click.option(
    "--root",
    "-d",
    envvar=RESOURCES_DIR_ENV,
    default=DEFAULT_RESOURCES_DIR,
    show_default=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory to scan for resources",
)
@click.option(
    "--prefix-file",
    "-p",
    envvar=PREFIX_FILE_ENV,
    default=DEFAULT_PREFIX_FILE,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Namespace prefix file prepended to Turtle and SPARQL payloads",
)
@click.option(
    "--formats-file",
    "-f",
    envvar=FORMATS_FILE_ENV,
    default=DEFAULT_FORMATS_FILE,
    type=click.Path(dir_okay=False, path_type=Path),
    help="File listing allowed binary extensions, one per line",
)
@click.option("--user", envvar=USER_ENV, default="", help="Repository username")
@click.option("--password", envvar=PASSWORD_ENV, default="", help="Repository password")
@click.option(
    "--mode",
    type=click.Choice(list(MODE_CHOICES)),
    default="both",
    show_default=True,
    help="Which passes to run",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be uploaded without uploading"
)
@click.option("--no-progress", is_flag=True, help="Disable progress display")
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    show_default=True,
    help="Request timeout in seconds",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pyfcimport")
@click.pass_context
def main(
    ctx: Any,
    url: str,
    root: Path,
    prefix_file: Path,
    formats_file: Path,
    user: str,
    password: str,
    mode: str,
    dry_run: bool,
    no_progress: bool,
    timeout: float,
    verbose: bool,
) -> None:
    """Load a directory tree of Turtle, SPARQL update and binary files
    into a linked data repository.

    The create pass PUTs containers and resources from .ttl files and
    allowed binaries; the update pass PATCHes them with .ru/.rq files.
    """
    _configure_logging(verbose)

    url = normalize_base_url(url)
    logger.info("Repository URL: %s", url)
    logger.info("Resources dir: %s", root.resolve())
    logger.info("Prefix file: %s", prefix_file)

    try:
        preamble = load_prefix_file(prefix_file)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    allowed_formats = load_allowed_binary_formats(formats_file)

    auth_header: Optional[str] = build_auth_header(user, password)
    if auth_header is not None:
        logger.info("Using authentication")

    with RepositoryClient(url, auth_header=auth_header, timeout=timeout) as client:
        finder = ResourceFinder(
            root,
            client,
            preamble,
            allowed_formats,
            dry_run=dry_run,
        )
        try:
            run_passes(finder, MODE_CHOICES[mode], show_progress=not no_progress)
        except ResourceReadError as e:
            logger.error("Aborting: %s", e)
            ctx.exit(1)
