"""HTTP routes of the relay that forwards calls to the data API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from app.schemas import ProxySendRequest
from client.consentium import ConsentiumClient, build_relay_client
from models.records import SensorReading, TransportResult
from services.coercion import coerce_number

router = APIRouter()


def get_client() -> ConsentiumClient:
    return build_relay_client()


def _relay_response(result: TransportResult) -> Response:
    if result.status == 0:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=result.error or "Upstream request failed.",
        )
    if isinstance(result.body, str):
        return PlainTextResponse(result.body, status_code=result.status)
    return JSONResponse(result.body, status_code=result.status)


@router.post(
    "/send",
    summary="Relay a batch of readings to the update endpoint.",
)
def relay_send(
    request: ProxySendRequest,
    client: ConsentiumClient = Depends(get_client),
) -> Response:
    readings = [
        SensorReading(info=sensor.info, value=coerce_number(sensor.value))
        for sensor in request.sensors
    ]
    result = client.send_data(
        request.send_key,
        request.board_key,
        readings,
        board_info=request.board_info,
    )
    return _relay_response(result)


@router.get(
    "/receive",
    summary="Relay a feed request and return the upstream document unchanged.",
)
def relay_receive(
    receive_key: str = Query(..., alias="receiveKey"),
    board_key: str = Query(..., alias="boardKey"),
    recents: bool = Query(True),
    client: ConsentiumClient = Depends(get_client),
) -> Response:
    result = client.receive_data(receive_key, board_key, recents=recents)
    return _relay_response(result)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
