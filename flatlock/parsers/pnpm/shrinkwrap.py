"""Spec grammar for shrinkwrap.yaml (pnpm v3/v4 era).

Keys are slash-delimited:

    /lodash/4.17.21
    /@babel/core/7.23.0
    /foo/1.0.0/bar@2.0.0          (peer suffix after the version)
    /@emotion/styled/10.0.27/react@17.0.2

Scoped names take two segments, so the version is the third segment.
"""

from typing import Any

from ...models import UNPARSEABLE, PackageSpec, is_local_reference


def strip_leading_slash(spec: str) -> str:
    return spec[1:] if spec.startswith("/") else spec


def split_slash_spec(cleaned: str) -> PackageSpec:
    """Split a leading-slash-free `name/version[/...]` spec.

    Shared with the v5 grammar once its `_` peer suffix is removed.
    """
    if not cleaned:
        return UNPARSEABLE

    parts = cleaned.split("/")

    if cleaned.startswith("@"):
        if len(parts) < 3:
            return UNPARSEABLE
        scope, name, version = parts[0], parts[1], parts[2]
        if len(scope) < 2 or not name or not version:
            return UNPARSEABLE
        return PackageSpec(f"{scope}/{name}", version)

    if len(parts) < 2:
        return UNPARSEABLE
    name, version = parts[0], parts[1]
    if not name or not version:
        return UNPARSEABLE
    return PackageSpec(name, version)


def parse_spec_shrinkwrap(spec: Any) -> PackageSpec:
    """Parse a shrinkwrap-era package key.

    Args:
        spec: Package key, e.g. "/@babel/core/7.23.0"

    Returns:
        PackageSpec with name and version, or (None, None) for link:/file:
        references and anything unparseable.
    """
    if not isinstance(spec, str) or is_local_reference(spec):
        return UNPARSEABLE
    return split_slash_spec(strip_leading_slash(spec))


def has_peer_suffix(spec: Any) -> bool:
    """Check for segments after the version (`/name/1.0.0/peer@2.0.0`)."""
    if not isinstance(spec, str):
        return False
    cleaned = strip_leading_slash(spec)
    slashes = cleaned.count("/")
    return slashes > 2 if cleaned.startswith("@") else slashes > 1


def extract_peer_suffix(spec: Any) -> str | None:
    """Return the segments after the version, or None when there are none."""
    if not isinstance(spec, str):
        return None
    cleaned = strip_leading_slash(spec)
    parts = cleaned.split("/")
    fixed = 3 if cleaned.startswith("@") else 2
    if len(parts) <= fixed:
        return None
    return "/".join(parts[fixed:])
