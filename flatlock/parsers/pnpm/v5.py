"""Spec grammar for pnpm-lock.yaml 5.x (including 5.4-inlineSpecifiers).

    /lodash/4.17.21
    /@babel/core/7.23.0
    /styled-jsx/3.0.9_react@17.0.2
    /foo/1.0.0_@babel+core@7.23.0+react@18.2.0

Everything from the first `_` is the peer suffix.
"""

from typing import Any

from ...models import UNPARSEABLE, PackageSpec, is_local_reference
from .shrinkwrap import split_slash_spec, strip_leading_slash


def parse_spec_v5(spec: Any) -> PackageSpec:
    """Parse a v5-era package key.

    Args:
        spec: Package key, e.g. "/styled-jsx/3.0.9_react@17.0.2"

    Returns:
        PackageSpec, or (None, None) when unparseable.
    """
    if not isinstance(spec, str) or is_local_reference(spec):
        return UNPARSEABLE
    cleaned = strip_leading_slash(spec).split("_", 1)[0]
    return split_slash_spec(cleaned)


def has_peer_suffix_v5(spec: Any) -> bool:
    return isinstance(spec, str) and "_" in spec


def extract_peer_suffix_v5(spec: Any) -> str | None:
    """Return the text after the first `_`, e.g. "react@17.0.2"."""
    if not isinstance(spec, str) or "_" not in spec:
        return None
    return spec.split("_", 1)[1]
