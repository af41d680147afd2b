"""Stream endpoints and tolerant decoding into a :class:`StreamSet`."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Optional, Sequence

from ..errors import StravaDecodeError
from ..models import STREAM_TYPES, Stream, StreamSet
from .base import Service

LOGGER = logging.getLogger(__name__)

Cancel = Optional[threading.Event]

SEGMENT_STREAM_TYPES = frozenset({"distance", "latlng", "altitude"})
EFFORT_STREAM_TYPES = frozenset(STREAM_TYPES) - {"temp"}


def decode_stream_set(payload: Any, allowed: Iterable[str] = STREAM_TYPES) -> StreamSet:
    """Decode a list (or ``key_by_type`` object) of streams.

    Items that are not objects or carry an unknown/disallowed type are skipped
    one by one; only a top-level payload of the wrong shape is an error.
    """

    if isinstance(payload, dict):
        items = [
            dict(value, type=value.get("type") or key) if isinstance(value, dict) else value
            for key, value in payload.items()
        ]
    elif isinstance(payload, list):
        items = payload
    else:
        raise StravaDecodeError(
            f"stream payload must be a list or object, got {type(payload).__name__}"
        )
    permitted = frozenset(allowed)
    stream_set = StreamSet()
    for item in items:
        if not isinstance(item, dict):
            LOGGER.debug("Skipping non-object stream item %r", type(item).__name__)
            continue
        stream_type = item.get("type")
        if stream_type not in permitted:
            LOGGER.debug("Skipping stream of unhandled type %r", stream_type)
            continue
        try:
            stream = Stream.from_payload(item)
        except (TypeError, ValueError) as exc:
            LOGGER.debug("Skipping malformed %s stream: %s", stream_type, exc)
            continue
        setattr(stream_set, stream_type, stream)
    return stream_set


class StreamsService(Service):
    def _fetch(
        self,
        path: str,
        types: Sequence[str],
        resolution: str,
        allowed: Iterable[str],
        cancel: Cancel,
    ) -> StreamSet:
        params: dict = {"key_by_type": True}
        if types:
            params["keys"] = list(types)
        if resolution:
            params["resolution"] = resolution
        return self._dispatcher.get(
            path,
            params,
            result=lambda payload: decode_stream_set(payload, allowed),
            cancel=cancel,
        )

    def get_activity_streams(
        self,
        activity_id: int,
        types: Sequence[str],
        resolution: str = "",
        cancel: Cancel = None,
    ) -> StreamSet:
        return self._fetch(
            f"/activities/{activity_id}/streams", types, resolution, STREAM_TYPES, cancel
        )

    def get_segment_streams(
        self,
        segment_id: int,
        types: Sequence[str],
        resolution: str = "",
        cancel: Cancel = None,
    ) -> StreamSet:
        return self._fetch(
            f"/segments/{segment_id}/streams",
            types,
            resolution,
            SEGMENT_STREAM_TYPES,
            cancel,
        )

    def get_segment_effort_streams(
        self,
        effort_id: int,
        types: Sequence[str],
        resolution: str = "",
        cancel: Cancel = None,
    ) -> StreamSet:
        return self._fetch(
            f"/segment_efforts/{effort_id}/streams",
            types,
            resolution,
            EFFORT_STREAM_TYPES,
            cancel,
        )

    def get_route_streams(
        self, route_id: int, types: Sequence[str] = (), cancel: Cancel = None
    ) -> StreamSet:
        return self._fetch(
            f"/routes/{route_id}/streams", types, "", SEGMENT_STREAM_TYPES, cancel
        )
