"""Reshaping of wide-table feed documents into labeled readings."""

from __future__ import annotations

from typing import Any, List, Mapping

from models.records import SensorReading
from services.coercion import coerce_number

MAX_FIELDS = 8


class FeedFlattener:
    """Pure reshaping component that can be unit tested in isolation.

    The retrieval endpoint returns labels once on ``board`` (``info1`` to
    ``info8``) and one row per feed with matching ``value1`` to ``value8``
    columns. Readings are emitted feed by feed, in ascending index order,
    for every index where both the label and the value are present.
    """

    def __init__(self, max_fields: int = MAX_FIELDS) -> None:
        self.max_fields = max_fields

    def flatten(self, document: Any) -> List[SensorReading]:
        if not isinstance(document, Mapping):
            return []
        board = document.get("board")
        if not isinstance(board, Mapping):
            board = {}
        feeds = document.get("feeds")
        if not isinstance(feeds, list):
            feeds = []

        readings: List[SensorReading] = []
        for feed in feeds:
            if not isinstance(feed, Mapping):
                continue
            for index in range(1, self.max_fields + 1):
                info_key = f"info{index}"
                value_key = f"value{index}"
                if info_key in board and value_key in feed:
                    readings.append(
                        SensorReading(
                            info=board[info_key],
                            value=coerce_number(feed[value_key]),
                        )
                    )
        return readings
