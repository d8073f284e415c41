from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


DEFAULT_SEND_URL = "https://api.consentiumiot.com/v2/updateData"
DEFAULT_RECEIVE_URL = "https://api.consentiumiot.com/getData"

_SEND_URL_ENV = "CONSENTIUM_SEND_URL"
_RECEIVE_URL_ENV = "CONSENTIUM_RECEIVE_URL"
_PROXY_BASE_ENV = "CONSENTIUM_PROXY_BASE"
_VERIFY_SSL_ENV = "CONSENTIUM_VERIFY_SSL"
_CA_BUNDLE_ENV = "CONSENTIUM_CA_BUNDLE"
_TIMEOUT_ENV = "CONSENTIUM_TIMEOUT"
_PRECISION_ENV = "CONSENTIUM_PRECISION"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_FALSE_VALUES = {"0", "false", "no", "off"}
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    send_url: str
    receive_url: str
    proxy_base: Optional[str]
    verify_ssl: bool
    ca_bundle: Optional[str]
    timeout: float
    precision: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _FALSE_VALUES:
        return False
    if candidate in _TRUE_VALUES:
        return True
    return default


def _read_timeout(default: float) -> float:
    value = os.getenv(_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_precision(default: int) -> int:
    value = os.getenv(_PRECISION_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        send_url=_read_str_env(_SEND_URL_ENV, DEFAULT_SEND_URL),
        receive_url=_read_str_env(_RECEIVE_URL_ENV, DEFAULT_RECEIVE_URL),
        proxy_base=_read_optional_env(_PROXY_BASE_ENV, None),
        verify_ssl=_read_bool_env(_VERIFY_SSL_ENV, True),
        ca_bundle=_read_optional_env(_CA_BUNDLE_ENV, None),
        timeout=_read_timeout(30.0),
        precision=_read_precision(4),
        log_level=_read_log_level("INFO"),
    )
