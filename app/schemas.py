"""Pydantic schemas for the wire documents exchanged with the data API."""

from __future__ import annotations

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field

from models.records import (
    DEFAULT_ARCHITECTURE,
    DEFAULT_DEVICE_MAC,
    DEFAULT_FIRMWARE_VERSION,
    DEFAULT_SIGNAL_STRENGTH,
)


class SensorDataEntry(BaseModel):
    """One sensor value as submitted, formatted to a fixed precision."""

    info: str
    data: str


class SensorsBlock(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sensor_data: List[SensorDataEntry] = Field(default_factory=list, alias="sensorData")


class BoardInfoPayload(BaseModel):
    """Board metadata block of a submission."""

    model_config = ConfigDict(populate_by_name=True)

    firmware_version: str = Field(DEFAULT_FIRMWARE_VERSION, alias="firmwareVersion")
    architecture: str = DEFAULT_ARCHITECTURE
    device_mac: str = Field(DEFAULT_DEVICE_MAC, alias="deviceMAC")
    status_ota: bool = Field(False, alias="statusOTA")
    signal_strength: Union[int, float] = Field(DEFAULT_SIGNAL_STRENGTH, alias="signalStrength")


class SubmissionPayload(BaseModel):
    """Full JSON body posted to the update endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    sensors: SensorsBlock
    board_info: BoardInfoPayload = Field(alias="boardInfo")


class ProxyReading(BaseModel):
    info: str
    value: Any = None


class ProxySendRequest(BaseModel):
    """Body accepted by the relay's ``/send`` endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    send_key: str = Field(..., alias="sendKey")
    board_key: str = Field(..., alias="boardKey")
    sensors: List[ProxyReading] = Field(default_factory=list)
    board_info: Dict[str, Any] = Field(default_factory=dict, alias="boardInfo")
