"""Strategies for reaching the data API: directly or through a relay."""

from __future__ import annotations

import ssl
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import httpx

from client.config import ClientConfig
from models.records import SensorReading
from services.coercion import finite_or_none
from services.payload import PayloadBuilder


def _verify_option(config: ClientConfig) -> Union[bool, ssl.SSLContext]:
    if not config.verify_ssl:
        return False
    if config.ca_bundle:
        return ssl.create_default_context(cafile=config.ca_bundle)
    return True


def _flag(value: bool) -> str:
    return "true" if value else "false"


class BaseTransport(ABC):
    """Owns the HTTP connection and knows how requests are shaped."""

    name = "base"

    def __init__(self, config: ClientConfig, http_client: Optional[httpx.Client] = None) -> None:
        self.config = config
        self._client = http_client or httpx.Client(
            timeout=config.timeout,
            verify=_verify_option(config),
        )

    @property
    @abstractmethod
    def send_endpoint(self) -> str:
        ...

    @property
    @abstractmethod
    def receive_endpoint(self) -> str:
        ...

    @abstractmethod
    def send(
        self,
        send_key: str,
        board_key: str,
        sensors: Sequence[SensorReading],
        board_info: Mapping[str, Any],
        precision: int,
    ) -> httpx.Response:
        ...

    @abstractmethod
    def receive(self, receive_key: str, board_key: str, recents: bool) -> httpx.Response:
        ...

    def close(self) -> None:
        self._client.close()


class DirectTransport(BaseTransport):
    """Calls the remote API, authenticating through query parameters."""

    name = "direct"

    @property
    def send_endpoint(self) -> str:
        return self.config.send_url

    @property
    def receive_endpoint(self) -> str:
        return self.config.receive_url

    def send(
        self,
        send_key: str,
        board_key: str,
        sensors: Sequence[SensorReading],
        board_info: Mapping[str, Any],
        precision: int,
    ) -> httpx.Response:
        payload = PayloadBuilder(precision=precision).build(sensors, board_info)
        return self._client.post(
            self.send_endpoint,
            params={"sendKey": send_key, "boardKey": board_key},
            json=payload.model_dump(by_alias=True),
        )

    def receive(self, receive_key: str, board_key: str, recents: bool) -> httpx.Response:
        return self._client.get(
            self.receive_endpoint,
            params={
                "recents": _flag(recents),
                "receiveKey": receive_key,
                "boardKey": board_key,
            },
        )


class ProxyTransport(BaseTransport):
    """Forwards raw arguments to a relay, which builds the upstream request."""

    name = "proxy"

    def __init__(self, config: ClientConfig, http_client: Optional[httpx.Client] = None) -> None:
        if not config.proxy_base:
            raise ValueError("ProxyTransport requires a proxy base URL.")
        super().__init__(config, http_client)

    @property
    def send_endpoint(self) -> str:
        return f"{self.config.proxy_base}/send"

    @property
    def receive_endpoint(self) -> str:
        return f"{self.config.proxy_base}/receive"

    def send(
        self,
        send_key: str,
        board_key: str,
        sensors: Sequence[SensorReading],
        board_info: Mapping[str, Any],
        precision: int,
    ) -> httpx.Response:
        body: Dict[str, Any] = {
            "sendKey": send_key,
            "boardKey": board_key,
            "sensors": [
                {"info": reading.info, "value": finite_or_none(reading.value)} for reading in sensors
            ],
            "boardInfo": {key: finite_or_none(value) for key, value in board_info.items()},
        }
        return self._client.post(self.send_endpoint, json=body)

    def receive(self, receive_key: str, board_key: str, recents: bool) -> httpx.Response:
        return self._client.get(
            self.receive_endpoint,
            params={
                "receiveKey": receive_key,
                "boardKey": board_key,
                "recents": _flag(recents),
            },
        )


def build_transport(config: ClientConfig, http_client: Optional[httpx.Client] = None) -> BaseTransport:
    if config.proxy_base:
        return ProxyTransport(config, http_client)
    return DirectTransport(config, http_client)
