"""Spec grammar for pnpm-lock.yaml 6.0 and 9.0.

    /lodash@4.17.21                          (v6)
    /@babel/core@7.23.0(supports-color@8.1.1)
    lodash@4.17.21                           (v9, no leading slash)
    @emotion/styled@10.0.27(react@17.0.2)(@types/react@18.2.0)
"""

import re
from typing import Any

from ...models import UNPARSEABLE, PackageSpec, is_local_reference
from .shrinkwrap import strip_leading_slash

PEER_GROUP_RE = re.compile(r"\(([^)]+)\)")


def split_at_version(text: str) -> PackageSpec:
    """Split `name@version` at the last `@` that is not the scope marker."""
    at = text.rfind("@")
    if at <= 0:
        return UNPARSEABLE
    name, version = text[:at], text[at + 1 :]
    if not name or not version:
        return UNPARSEABLE
    return PackageSpec(name, version)


def parse_spec_v6plus(spec: Any) -> PackageSpec:
    """Parse a v6 or v9 package key.

    Args:
        spec: Package key with or without leading slash

    Returns:
        PackageSpec, or (None, None) when unparseable.
    """
    if not isinstance(spec, str) or is_local_reference(spec):
        return UNPARSEABLE
    cleaned = strip_leading_slash(spec)
    if not cleaned:
        return UNPARSEABLE
    return split_at_version(cleaned.split("(", 1)[0])


def has_peer_suffix_v6plus(spec: Any) -> bool:
    return isinstance(spec, str) and "(" in spec and ")" in spec


def extract_peer_suffix_v6plus(spec: Any) -> str | None:
    """Return everything from the first `(`, e.g. "(react@18.2.0)"."""
    if not isinstance(spec, str) or "(" not in spec:
        return None
    return spec[spec.index("(") :]


def parse_peer_dependencies(peer_suffix: Any) -> list[PackageSpec]:
    """Parse `(name@version)` groups from a peer suffix.

    Args:
        peer_suffix: e.g. "(@babel/core@7.23.0)(react@18.2.0)"

    Returns:
        One PackageSpec per well-formed group, in order.
    """
    if not isinstance(peer_suffix, str):
        return []

    peers: list[PackageSpec] = []
    for group in PEER_GROUP_RE.findall(peer_suffix):
        parsed = split_at_version(group)
        if parsed.name:
            peers.append(parsed)
    return peers
