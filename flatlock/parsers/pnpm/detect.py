"""Era detection for pnpm lockfiles."""

from typing import Any

from ...exceptions import ParseError
from ...models import PnpmEra


def _era_for_major(major: int) -> PnpmEra | None:
    if major >= 9:
        return PnpmEra.V9
    if major >= 6:
        return PnpmEra.V6
    if major == 5:
        return PnpmEra.V5
    return None


def detect_era(document: Any) -> PnpmEra:
    """Work out which grammar a parsed pnpm lockfile uses.

    Args:
        document: Parsed YAML root of a pnpm lockfile

    Returns:
        The lockfile's PnpmEra.

    Raises:
        ParseError: If the document carries no recognizable version marker.
    """
    if not isinstance(document, dict):
        raise ParseError("pnpm lockfile root is not a mapping")

    if "shrinkwrapVersion" in document:
        return PnpmEra.SHRINKWRAP

    version = document.get("lockfileVersion")

    # YAML reads `5.4` and `9.0` as floats, `5` as an int
    if isinstance(version, (int, float)) and not isinstance(version, bool):
        era = _era_for_major(int(version))
        if era is not None:
            return era
    elif isinstance(version, str):
        if "inlineSpecifiers" in version:
            return PnpmEra.V5_INLINE
        major = version.split(".", 1)[0]
        if major.isdigit():
            era = _era_for_major(int(major))
            if era is not None:
                return era

    raise ParseError(f"Unsupported pnpm lockfileVersion: {version!r}")
