"""Name normalisation for exported APIs.

All versions of one logical API share a group key (the name without a trailing
``-v<N>``) and are staged in the same group directory. Within a group each API
is stored under its version-qualified name.
"""

import re

from apim_sync.models import NormalizedName

# Marks a non-primary revision, e.g. "billing;rev=2"
REVISION_MARKER = ";rev="

_VERSION_SUFFIX = re.compile(r"-v\d+$")


def is_revision(raw_name: str) -> bool:
    return REVISION_MARKER in raw_name


def group_key(raw_name: str) -> str:
    """Strip a trailing ``-v<digits>`` suffix: ``orders-v2`` -> ``orders``."""
    return _VERSION_SUFFIX.sub("", raw_name)


def qualify(name: str, version: str, separator: str = "-") -> str:
    """Append ``version`` to ``name`` unless it is empty or already there.

    Idempotent: ``qualify(qualify(n, v), v) == qualify(n, v)``.
    """
    if not version or name.endswith(version):
        return name
    return f"{name}{separator}{version}"


def normalize(raw_name: str, version: str, display_name: str = "") -> NormalizedName:
    """Derive the group key and version-qualified names of an API.

    Args:
        raw_name: Name as reported by the platform
        version: Version tag, may be empty
        display_name: Human-readable name, qualified with a space separator

    Returns:
        NormalizedName with group key, qualified name and qualified display name
    """
    return NormalizedName(
        group_key=group_key(raw_name),
        qualified_name=qualify(raw_name, version),
        qualified_display_name=qualify(display_name, version, separator=" ") if display_name else "",
    )
