"""Protocol definition for lockfile parsers."""

from pathlib import Path
from typing import Any, Iterator, Protocol

from ..models import Dependency, LockfileType, WorkspaceMember


class LockfileParser(Protocol):
    """Protocol for lockfile parser plugins.

    Each parser handles one lockfile family. Parsers are registered with
    ParserRegistry and selected by LockfileType once the detector has
    classified the content.

    Parsing is split in two steps so that document-level errors surface
    eagerly while dependency extraction stays lazy:

        document = parser.load(content)            # raises ParseError
        for dep in parser.iter_dependencies(document):
            ...

    Example:
        class PackageLockParser:
            name = "npm-package-lock"
            lockfile_type = LockfileType.NPM
            supported_files = ("package-lock.json", "npm-shrinkwrap.json")

            def supports(self, lock_file_name: str) -> bool:
                return lock_file_name in self.supported_files

            def load(self, content: str) -> Any:
                return json.loads(content)
            ...
    """

    @property
    def name(self) -> str:
        """Human-readable name of this parser.

        Used for logging and diagnostics.
        Examples: "npm-package-lock", "pnpm-lock", "yarn-berry-lock"
        """
        ...

    @property
    def lockfile_type(self) -> LockfileType:
        """The lockfile family this parser reads."""
        ...

    @property
    def supported_files(self) -> tuple[str, ...]:
        """Lock file names this parser conventionally handles.

        Each entry is a filename (not a path). Both yarn parsers claim
        "yarn.lock"; the detector tells them apart by content.
        """
        ...

    def supports(self, lock_file_name: str) -> bool:
        """Check if the filename is one this parser conventionally reads.

        Args:
            lock_file_name: Filename (not full path) to check

        Returns:
            True if the name is in supported_files.
        """
        ...

    def load(self, content: str) -> Any:
        """Parse lockfile text into a document.

        Args:
            content: Raw lockfile text

        Returns:
            The parsed document, accepted by the other methods.

        Raises:
            ParseError: If the text is not a valid document of this family.
        """
        ...

    def iter_dependencies(self, document: Any) -> Iterator[Dependency]:
        """Lazily yield the third-party packages recorded in a document.

        Workspace-local and protocol-local entries are never yielded.
        """
        ...

    def workspace_members(self, document: Any, repo_dir: str | Path | None = None) -> list[WorkspaceMember]:
        """Describe the locally developed packages the document records.

        Args:
            document: Parsed document
            repo_dir: Optional repository checkout used to read manifests

        Returns:
            Workspace members, possibly empty.
        """
        ...


def descriptor_index(parser: LockfileParser, document: Any) -> dict[str, str]:
    """Map `name@range` descriptors to resolved `name@version` keys.

    Only lockfiles keyed by descriptor (yarn) provide one; for the others the
    mapping is empty.
    """
    descriptors = getattr(parser, "descriptors", None)
    if descriptors is None:
        return {}
    return descriptors(document)
