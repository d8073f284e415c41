from __future__ import annotations

import json
import math
import ssl
from pathlib import Path
from typing import Any, Callable, Dict, List

import certifi
import httpx
import pytest

from client.config import ClientConfig
from client.consentium import ConsentiumClient
from client.transport import DirectTransport, ProxyTransport, _verify_option, build_transport
from models.records import SensorReading

Handler = Callable[[httpx.Request], httpx.Response]


class Recorder:
    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def _client(config: ClientConfig, recorder: Recorder) -> ConsentiumClient:
    http_client = httpx.Client(transport=httpx.MockTransport(recorder))
    return ConsentiumClient(config, transport=build_transport(config, http_client))


@pytest.fixture()
def direct_config() -> ClientConfig:
    return ClientConfig(
        send_url="https://api.example.test/v2/updateData",
        receive_url="https://api.example.test/getData",
    )


@pytest.fixture()
def proxy_config() -> ClientConfig:
    return ClientConfig(proxy_base="http://relay.test/api")


def test_build_transport_picks_strategy(direct_config, proxy_config) -> None:
    direct = build_transport(direct_config, httpx.Client())
    proxy = build_transport(proxy_config, httpx.Client())
    try:
        assert isinstance(direct, DirectTransport)
        assert isinstance(proxy, ProxyTransport)
    finally:
        direct.close()
        proxy.close()


def test_direct_send_posts_built_payload(direct_config) -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json={"status": "ok"}))
    board_info = {"deviceMAC": "aa-bb-cc-11-22-33", "architecture": "ESP32"}

    with _client(direct_config, recorder) as client:
        result = client.send_data(
            "send-key",
            "board-key",
            [SensorReading(info="Temperature", value=21.25)],
            board_info=board_info,
            precision=2,
        )

    assert result.ok is True
    assert result.status == 200
    assert result.body == {"status": "ok"}
    assert result.error is None

    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/v2/updateData"
    assert request.url.params["sendKey"] == "send-key"
    assert request.url.params["boardKey"] == "board-key"
    body = json.loads(request.content)
    assert body["sensors"] == {"sensorData": [{"info": "Temperature", "data": "21.25"}]}
    assert body["boardInfo"]["deviceMAC"] == "AA:BB:CC:11:22:33"
    assert body["boardInfo"]["architecture"] == "ESP32"
    assert body["boardInfo"]["firmwareVersion"] == "0.0"
    assert board_info["deviceMAC"] == "aa-bb-cc-11-22-33"


def test_send_keeps_non_json_body_as_text(direct_config) -> None:
    recorder = Recorder(lambda request: httpx.Response(200, text="accepted"))

    with _client(direct_config, recorder) as client:
        result = client.send_data("s", "b", [SensorReading(info="T", value=1)])

    assert result.ok is True
    assert result.body == "accepted"


def test_api_error_is_reported_with_body(direct_config) -> None:
    recorder = Recorder(lambda request: httpx.Response(401, json={"message": "invalid key"}))

    with _client(direct_config, recorder) as client:
        result = client.send_data("bad", "b", [SensorReading(info="T", value=1)])

    assert result.ok is False
    assert result.status == 401
    assert result.body == {"message": "invalid key"}
    assert result.error is None


def test_connection_failure_is_reported_not_raised(direct_config) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(direct_config, Recorder(refuse)) as client:
        sent = client.send_data("s", "b", [SensorReading(info="T", value=1)])
        received = client.receive_data("r", "b")

    assert sent.ok is False
    assert sent.status == 0
    assert "Could not connect" in sent.error
    assert received.status == 0
    assert received.feeds is None
    assert "getData" in received.error


def test_timeout_is_reported(direct_config) -> None:
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with _client(direct_config, Recorder(slow)) as client:
        result = client.receive_data("r", "b")

    assert result.status == 0
    assert "timed out" in result.error


def test_direct_receive_flattens_feeds(direct_config) -> None:
    document = {
        "board": {"info1": "Temperature", "info2": "Humidity"},
        "feeds": [{"value1": "20.5", "value2": 40}, {"value1": "21.0"}],
    }
    recorder = Recorder(lambda request: httpx.Response(200, json=document))

    with _client(direct_config, recorder) as client:
        result = client.receive_data("recv-key", "board-key", recents=False)

    assert result.ok is True
    assert result.body == document
    assert result.feeds == [
        SensorReading(info="Temperature", value=20.5),
        SensorReading(info="Humidity", value=40.0),
        SensorReading(info="Temperature", value=21.0),
    ]
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.query == b"recents=false&receiveKey=recv-key&boardKey=board-key"


def test_receive_non_json_response_has_no_feeds(direct_config) -> None:
    recorder = Recorder(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))

    with _client(direct_config, recorder) as client:
        result = client.receive_data("r", "b")

    assert result.ok is False
    assert result.status == 502
    assert result.body == "<html>Bad Gateway</html>"
    assert result.feeds is None


def test_proxy_send_forwards_raw_arguments(proxy_config) -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json={"relayed": True}))

    with _client(proxy_config, recorder) as client:
        result = client.send_data(
            "send-key",
            "board-key",
            [SensorReading(info="Light", value=300.0)],
            board_info={"deviceMAC": "aabbcc112233", "statusOTA": True},
        )

    assert result.ok is True
    request = recorder.requests[0]
    assert str(request.url) == "http://relay.test/api/send"
    assert json.loads(request.content) == {
        "sendKey": "send-key",
        "boardKey": "board-key",
        "sensors": [{"info": "Light", "value": 300.0}],
        "boardInfo": {"deviceMAC": "AA:BB:CC:11:22:33", "statusOTA": True},
    }


def test_proxy_receive_uses_relay_endpoint(proxy_config) -> None:
    document = {"board": {"info1": "Light"}, "feeds": [{"value1": 12}]}
    recorder = Recorder(lambda request: httpx.Response(200, json=document))

    with _client(proxy_config, recorder) as client:
        result = client.receive_data("recv-key", "board-key")

    request = recorder.requests[0]
    assert request.url.path == "/api/receive"
    assert request.url.params["receiveKey"] == "recv-key"
    assert request.url.params["recents"] == "true"
    assert result.feeds == [SensorReading(info="Light", value=12.0)]


def test_proxy_transport_requires_base() -> None:
    with pytest.raises(ValueError):
        ProxyTransport(ClientConfig(), httpx.Client())


def test_proxy_send_replaces_non_finite_numbers_with_null(proxy_config) -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json={"relayed": True}))

    with _client(proxy_config, recorder) as client:
        result = client.send_data(
            "s",
            "b",
            [SensorReading(info="T", value=math.nan), SensorReading(info="L", value=math.inf)],
            board_info={"signalStrength": -math.inf},
        )

    assert result.ok is True
    body = json.loads(recorder.requests[0].content)
    assert body["sensors"] == [{"info": "T", "value": None}, {"info": "L", "value": None}]
    assert body["boardInfo"] == {"signalStrength": None}


def test_direct_send_with_unparsable_signal_uses_default(direct_config) -> None:
    recorder = Recorder(lambda request: httpx.Response(200, json={}))

    with _client(direct_config, recorder) as client:
        result = client.send_data(
            "s",
            "b",
            [SensorReading(info="T", value=math.nan)],
            board_info={"signalStrength": "weak"},
        )

    assert result.ok is True
    body = json.loads(recorder.requests[0].content)
    assert body["boardInfo"]["signalStrength"] == 0
    assert body["sensors"]["sensorData"] == [{"info": "T", "data": "NaN"}]


def test_verify_option_follows_tls_settings(tmp_path) -> None:
    ca_path = tmp_path / "ca.pem"
    ca_path.write_text(Path(certifi.where()).read_text())

    assert _verify_option(ClientConfig()) is True
    assert _verify_option(ClientConfig(verify_ssl=False, ca_bundle=str(ca_path))) is False
    assert isinstance(_verify_option(ClientConfig(ca_bundle=str(ca_path))), ssl.SSLContext)


def test_transport_passes_tls_and_timeout_to_httpx(monkeypatch) -> None:
    captured: Dict[str, Any] = {}

    class RecordingClient:
        def __init__(self, **kwargs: Any) -> None:
            captured.update(kwargs)

        def close(self) -> None:
            pass

    monkeypatch.setattr("client.transport.httpx.Client", RecordingClient)

    transport = DirectTransport(ClientConfig(verify_ssl=False, timeout=7.5))
    transport.close()

    assert captured == {"timeout": 7.5, "verify": False}


def test_missing_ca_bundle_raises_os_error(tmp_path) -> None:
    with pytest.raises(OSError):
        _verify_option(ClientConfig(ca_bundle=str(tmp_path / "missing.pem")))
