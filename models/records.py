"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_FIRMWARE_VERSION = "0.0"
DEFAULT_ARCHITECTURE = "unknown"
DEFAULT_DEVICE_MAC = "00:00:00:00:00:00"
DEFAULT_SIGNAL_STRENGTH = 0


@dataclass(slots=True)
class SensorReading:
    """A labeled sensor value, either submitted or flattened from a feed."""

    info: str
    value: float


@dataclass(slots=True)
class BoardInfo:
    """Board metadata attached to every submission."""

    firmware_version: str = DEFAULT_FIRMWARE_VERSION
    architecture: str = DEFAULT_ARCHITECTURE
    device_mac: str = DEFAULT_DEVICE_MAC
    status_ota: bool = False
    signal_strength: float = DEFAULT_SIGNAL_STRENGTH


@dataclass(slots=True)
class TransportResult:
    """Outcome of a single request against the data API.

    ``status`` is ``0`` when the request never produced an HTTP response, in
    which case ``error`` carries a human readable hint.
    """

    ok: bool
    status: int
    body: Any = None
    error: Optional[str] = None


@dataclass(slots=True)
class ReceiveResult(TransportResult):
    """Transport outcome plus the readings flattened from the response body."""

    feeds: Optional[list[SensorReading]] = None
