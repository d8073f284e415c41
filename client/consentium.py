"""Client for submitting and retrieving readings through a pluggable transport."""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import lru_cache
from typing import Any, Dict, Iterable, Mapping, Optional

import httpx

from client.config import ClientConfig, load_config
from client.transport import BaseTransport, build_transport
from models.records import ReceiveResult, SensorReading, TransportResult
from services.flattener import FeedFlattener
from services.mac import normalize_mac

logger = logging.getLogger(__name__)


class ConsentiumClient:
    """Best-effort client for the data API.

    Calls never raise for transport problems. A request that produced no HTTP
    response is reported with ``status=0`` and an ``error`` hint; an HTTP error
    response is reported with ``ok=False`` and whatever body the server sent.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[BaseTransport] = None,
        flattener: Optional[FeedFlattener] = None,
    ) -> None:
        self.config = config or load_config()
        self.transport = transport or build_transport(self.config)
        self.flattener = flattener or FeedFlattener()

    def __enter__(self) -> "ConsentiumClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    def send_data(
        self,
        send_key: str,
        board_key: str,
        sensors: Iterable[SensorReading],
        board_info: Optional[Mapping[str, Any]] = None,
        precision: Optional[int] = None,
    ) -> TransportResult:
        readings = list(sensors)
        board: Dict[str, Any] = dict(board_info or {})
        if board.get("deviceMAC"):
            board["deviceMAC"] = normalize_mac(board["deviceMAC"])
        digits = self.config.precision if precision is None else precision

        logger.info(
            "Submitting sensor readings",
            extra={
                "transport": self.transport.name,
                "board_key": board_key,
                "reading_count": len(readings),
            },
        )
        try:
            response = self.transport.send(send_key, board_key, readings, board, digits)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._transport_failure(TransportResult, self.transport.send_endpoint, exc)

        result = TransportResult(
            ok=response.is_success,
            status=response.status_code,
            body=_parse_body(response),
        )
        self._log_outcome("Submission", self.transport.send_endpoint, result)
        return result

    def receive_data(self, receive_key: str, board_key: str, recents: bool = True) -> ReceiveResult:
        logger.info(
            "Fetching sensor feeds",
            extra={"transport": self.transport.name, "board_key": board_key},
        )
        try:
            response = self.transport.receive(receive_key, board_key, recents)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._transport_failure(ReceiveResult, self.transport.receive_endpoint, exc)

        try:
            document = response.json()
        except ValueError:
            document = None

        if not document and not isinstance(document, (dict, list)):
            result = ReceiveResult(
                ok=response.is_success,
                status=response.status_code,
                body=response.text,
            )
        else:
            result = ReceiveResult(
                ok=response.is_success,
                status=response.status_code,
                body=document,
                feeds=self.flattener.flatten(document),
            )
        self._log_outcome("Retrieval", self.transport.receive_endpoint, result)
        return result

    def _transport_failure(self, result_type: type, endpoint: str, exc: Exception) -> Any:
        hint = _describe_error(exc, endpoint, self.config.timeout, self.transport.name)
        logger.warning(
            "Request failed before a response was received",
            extra={"transport": self.transport.name, "url": endpoint, "reason": hint},
        )
        return result_type(ok=False, status=0, error=hint)

    @staticmethod
    def _log_outcome(action: str, endpoint: str, result: TransportResult) -> None:
        extra: Dict[str, Any] = {"url": endpoint, "status": result.status}
        if isinstance(result, ReceiveResult) and result.feeds is not None:
            extra["reading_count"] = len(result.feeds)
        if result.ok:
            logger.info(f"{action} completed", extra=extra)
        else:
            logger.warning(f"{action} rejected by the server", extra=extra)


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _describe_error(exc: Exception, endpoint: str, timeout: float, transport: str) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return f"Request to {endpoint} timed out after {timeout}s."
    if isinstance(exc, httpx.ConnectError):
        advice = (
            "Check that the relay is running."
            if transport == "proxy"
            else "Check network access, TLS settings, or route calls through a proxy."
        )
        reason = str(exc) or type(exc).__name__
        return f"Could not connect to {endpoint}: {reason}. {advice}"
    return str(exc) or type(exc).__name__


@lru_cache
def build_relay_client() -> ConsentiumClient:
    """Client used by the relay service; always talks to the remote API directly."""
    config = replace(load_config(), proxy_base=None)
    return ConsentiumClient(config)
