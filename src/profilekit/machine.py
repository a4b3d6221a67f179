"""Machine identity — the key that partitions the local bookmark tier."""

from __future__ import annotations

import os
import socket
import sys
from typing import Optional

LOCAL_DOMAIN_SUFFIXES = (".localdomain", ".local", ".lan")

FALLBACK_MACHINE_ID = "unknown-machine"


def _raw_hostname() -> str:
    if sys.platform == "win32":
        name = os.environ.get("COMPUTERNAME", "")
        if name:
            return name
    return socket.gethostname()


def strip_local_suffix(hostname: str) -> str:
    """Drop a trailing local-domain suffix such as ``.local``."""
    lowered = hostname.lower()
    for suffix in LOCAL_DOMAIN_SUFFIXES:
        if lowered.endswith(suffix):
            return hostname[: -len(suffix)]
    return hostname


def detect_machine_id(override: Optional[str] = None) -> str:
    """Determine the identifier for the current machine.

    Priority: explicit override, then the platform hostname with any
    local-domain suffix stripped. Never returns an empty string: if
    stripping leaves nothing the raw hostname is used, and if even that
    is empty a fixed fallback is returned.

    Args:
        override: Explicit machine id (config or environment).

    Returns:
        str: Non-empty machine identifier.
    """
    if override and override.strip():
        return override.strip()

    raw = _raw_hostname().strip()
    stripped = strip_local_suffix(raw).strip()
    if stripped:
        return stripped
    if raw:
        return raw
    return FALLBACK_MACHINE_ID
