"""Construction of the submission document sent to the update endpoint."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional

from app.schemas import BoardInfoPayload, SensorDataEntry, SensorsBlock, SubmissionPayload
from models.records import (
    DEFAULT_ARCHITECTURE,
    DEFAULT_DEVICE_MAC,
    DEFAULT_FIRMWARE_VERSION,
    DEFAULT_SIGNAL_STRENGTH,
    BoardInfo,
    SensorReading,
)
from services.coercion import coerce_number, format_fixed
from services.mac import normalize_mac

DEFAULT_PRECISION = 4


def resolve_board_info(raw: Optional[Mapping[str, Any]]) -> BoardInfo:
    """Apply defaults to camelCase board metadata as callers supply it.

    Absent and falsy fields both fall back to their defaults.
    """
    raw = raw or {}
    signal = raw.get("signalStrength") or DEFAULT_SIGNAL_STRENGTH
    if isinstance(signal, bool) or not isinstance(signal, (int, float)):
        signal = coerce_number(signal)
    if not math.isfinite(signal):
        signal = DEFAULT_SIGNAL_STRENGTH
    return BoardInfo(
        firmware_version=str(raw.get("firmwareVersion") or DEFAULT_FIRMWARE_VERSION),
        architecture=str(raw.get("architecture") or DEFAULT_ARCHITECTURE),
        device_mac=str(normalize_mac(raw.get("deviceMAC")) or DEFAULT_DEVICE_MAC),
        status_ota=bool(raw.get("statusOTA")),
        signal_strength=signal,
    )


class PayloadBuilder:
    """Pure transform from readings and board metadata to a ``SubmissionPayload``."""

    def __init__(self, precision: int = DEFAULT_PRECISION) -> None:
        if precision < 0:
            raise ValueError("precision must be zero or greater.")
        self.precision = precision

    def build(
        self,
        sensors: Iterable[SensorReading],
        board_info: Optional[Mapping[str, Any]] = None,
    ) -> SubmissionPayload:
        entries = [
            SensorDataEntry(
                info=reading.info,
                data=format_fixed(coerce_number(reading.value), self.precision),
            )
            for reading in sensors
        ]
        board = resolve_board_info(board_info)
        return SubmissionPayload(
            sensors=SensorsBlock(sensor_data=entries),
            board_info=BoardInfoPayload(
                firmware_version=board.firmware_version,
                architecture=board.architecture,
                device_mac=board.device_mac,
                status_ota=board.status_ota,
                signal_strength=board.signal_strength,
            ),
        )
