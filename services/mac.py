"""MAC address normalization."""

from __future__ import annotations

import re
from typing import Optional

_NON_HEX_RE = re.compile(r"[^0-9A-F]")
_MAC_HEX_LENGTH = 12


def normalize_mac(mac: Optional[str]) -> Optional[str]:
    """Return ``mac`` as colon separated uppercase pairs, e.g. ``AA:BB:CC:11:22:33``.

    Empty values pass through. Input that does not reduce to exactly twelve
    hex digits is returned unmodified.
    """
    if not mac:
        return mac
    digits = _NON_HEX_RE.sub("", str(mac).upper())
    if len(digits) != _MAC_HEX_LENGTH:
        return mac
    return ":".join(digits[index:index + 2] for index in range(0, _MAC_HEX_LENGTH, 2))
