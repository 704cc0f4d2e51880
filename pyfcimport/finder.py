"""Traversal engine mapping a directory tree onto repository resources."""

import logging
import os
from pathlib import Path
from typing import Callable, Optional, Union

from .api import RepositoryClient
from .config import AllowedBinaryFormats
from .modes import ModeSettings, TraversalMode, settings_for
from .payload import PrefixPreamble, UploadPayload, guess_mime_type
from .walker import walk_tree

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]


def is_pair_tree_name(path: Path) -> bool:
    """Two-character directory names are pair-tree infrastructure."""
    return len(path.name) == 2


class ResourceFinder:
    """Walks a directory tree and uploads what each entry describes.

    In CREATE mode ``.ttl`` files become RDF resources, ``_.ttl`` defines the
    container for its directory, allowed binary formats are uploaded as
    binaries and directories without metadata become empty containers. In
    UPDATE mode ``.ru``/``.rq`` files are sent as SPARQL updates against the
    resources created earlier.

    The identifier of a file is its path relative to ``root`` with the
    matching extension removed, so ``collection/23/data.ttl`` is uploaded to
    ``collection/23/data``. A directory's identifier is its relative path.

    Examples:
        >>> finder = ResourceFinder(root, client, preamble, formats)
        >>> finder.run_all()
    """

    def __init__(
        self,
        root: Path,
        client: RepositoryClient,
        preamble: PrefixPreamble,
        allowed_formats: AllowedBinaryFormats,
        mode: TraversalMode = TraversalMode.CREATE,
        dry_run: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """Initialize the finder.

        Args:
            root: Directory to scan
            client: Client used for every upload
            preamble: Namespace prefixes prepended to RDF and SPARQL payloads
            allowed_formats: Extensions uploaded as binaries in CREATE mode
            mode: Initial traversal mode
            dry_run: Log what would be uploaded without sending requests
            progress_callback: Optional callback(label, identifier) invoked
                before each upload
        """
        self.root = Path(root)
        self.client = client
        self.preamble = preamble
        self.allowed_formats = allowed_formats
        self.dry_run = dry_run
        self.progress_callback = progress_callback
        self._settings: ModeSettings = settings_for(mode)

    @property
    def mode(self) -> TraversalMode:
        return self._settings.mode

    @property
    def settings(self) -> ModeSettings:
        return self._settings

    def set_mode(self, mode: Union[TraversalMode, str]) -> None:
        """Switch traversal mode between passes.

        Unknown values are ignored and the current mode stays in effect.
        """
        parsed = TraversalMode.parse(mode)
        if parsed is None:
            logger.debug("Unknown finder mode: %s", mode)
            return
        self._settings = settings_for(parsed)

    def run(self, mode: Optional[Union[TraversalMode, str]] = None) -> None:
        """Walk the tree once in the given (or current) mode."""
        if mode is not None:
            self.set_mode(mode)
        logger.info("Starting %s pass over %s", self.mode.value, self.root)
        walk_tree(self.root, self.visit_directory, self.visit_file)

    def run_all(self) -> None:
        """Run the CREATE pass followed by the UPDATE pass."""
        self.run(TraversalMode.CREATE)
        self.run(TraversalMode.UPDATE)

    def identifier_for(self, path: Path, extension: str = "") -> str:
        """Relative identifier for ``path`` with ``extension`` stripped."""
        relative = path.relative_to(self.root).as_posix()
        if relative == ".":
            relative = ""
        if extension and relative.endswith(extension):
            relative = relative[: -len(extension)]
        return relative

    def visit_directory(self, directory: Path) -> None:
        """Upload the container, update or binary a directory describes.

        Only the first matching rule fires: a metadata file for the active
        mode, then (CREATE only) a ``_<ext>`` binary, then (CREATE only) an
        empty container unless skipped or pair-tree named.
        """
        settings = self._settings
        identifier = self.identifier_for(directory)

        meta_file = self._find_meta_file(directory)
        if meta_file is not None:
            logger.info("%s container %s", settings.log_prefix, identifier)
            self._upload(identifier, UploadPayload.prefixed(self.preamble, meta_file))
            return

        if not settings.allows_binaries:
            return

        binary_file = self._find_binary_file(directory)
        if binary_file is not None:
            ext = binary_file.name[1:]
            logger.info("%s binary %s", settings.log_prefix, identifier)
            self._upload(
                identifier,
                UploadPayload.binary(binary_file, guess_mime_type(ext)),
            )
        elif not (settings.skip_dirs_without_meta_file or is_pair_tree_name(directory)):
            logger.info("%s container %s", settings.log_prefix, identifier)
            self._upload(identifier, UploadPayload.empty())

    def visit_file(self, path: Path) -> None:
        """Upload a file if it is a payload for the active mode."""
        settings = self._settings
        filename = path.name
        if filename.startswith("."):
            return

        file_type = settings.match_file_type(filename)
        if file_type is not None and filename != f"_{file_type}":
            identifier = self.identifier_for(path, file_type)
            logger.info("%s %s from %s", settings.log_prefix, identifier, filename)
            self._upload(identifier, UploadPayload.prefixed(self.preamble, path))
            return

        if not settings.allows_binaries:
            return

        ext = os.path.splitext(filename)[1]
        if ext and ext in self.allowed_formats and filename != f"_{ext}":
            identifier = self.identifier_for(path, ext)
            logger.info("%s %s from %s", settings.log_prefix, identifier, filename)
            self._upload(
                identifier,
                UploadPayload.binary(path, guess_mime_type(ext)),
            )

    def _find_meta_file(self, directory: Path) -> Optional[Path]:
        for name in self._settings.meta_file_names:
            candidate = directory / name
            if candidate.exists():
                return candidate
        return None

    def _find_binary_file(self, directory: Path) -> Optional[Path]:
        for ext in self.allowed_formats:
            candidate = directory / f"_{ext}"
            if candidate.exists():
                return candidate
        return None

    def _upload(self, identifier: str, payload: UploadPayload) -> bool:
        label = self._settings.log_prefix
        if self.progress_callback is not None:
            self.progress_callback(label, identifier)

        if self.dry_run:
            logger.info(
                "Dry run: would send %d bytes to %s",
                len(payload),
                self.client.resolve(identifier),
            )
            return True

        if self.mode == TraversalMode.CREATE:
            return self.client.create(identifier, payload, payload.mime_type)
        return self.client.patch(identifier, payload)
