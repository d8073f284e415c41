from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from settings import DEFAULT_RECEIVE_URL, DEFAULT_SEND_URL, get_settings

DEFAULT_TIMEOUT = 30.0
DEFAULT_PRECISION = 4


@dataclass(frozen=True)
class ClientConfig:
    send_url: str = DEFAULT_SEND_URL
    receive_url: str = DEFAULT_RECEIVE_URL
    proxy_base: Optional[str] = None
    verify_ssl: bool = True
    ca_bundle: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    precision: int = DEFAULT_PRECISION


def _clean_endpoint(url: str) -> str:
    # Endpoints may be written with the trailing "?" that precedes query keys.
    return url.strip().rstrip("?")


def load_config(
    send_url: Optional[str] = None,
    receive_url: Optional[str] = None,
    proxy_base: Optional[str] = None,
    verify_ssl: Optional[bool] = None,
    ca_bundle: Optional[str] = None,
    timeout: Optional[float] = None,
    precision: Optional[int] = None,
) -> ClientConfig:
    """Merge explicit overrides on top of the environment settings."""
    settings = get_settings()
    proxy = proxy_base or settings.proxy_base
    return ClientConfig(
        send_url=_clean_endpoint(send_url or settings.send_url),
        receive_url=_clean_endpoint(receive_url or settings.receive_url),
        proxy_base=proxy.rstrip("/") if proxy else None,
        verify_ssl=settings.verify_ssl if verify_ssl is None else verify_ssl,
        ca_bundle=ca_bundle or settings.ca_bundle,
        timeout=timeout if timeout is not None and timeout > 0 else settings.timeout,
        precision=precision if precision is not None and precision >= 0 else settings.precision,
    )
