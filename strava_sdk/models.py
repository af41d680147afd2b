"""Data types shared by the dispatch layer and the resource services."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

JSON = object()
"""Result shape marker: return the parsed JSON body unchanged."""

TEXT = object()
"""Result shape marker: return the response body as text (GPX/TCX exports)."""


@dataclass(frozen=True)
class Credential:
    """OAuth token pair plus the athlete snapshot returned with it.

    ``expires_at`` is absolute epoch seconds.
    """

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: float = 0.0
    token_type: str = "Bearer"
    athlete: Optional[Dict[str, Any]] = None

    @classmethod
    def from_token_response(
        cls, payload: Mapping[str, Any], now: Optional[float] = None
    ) -> "Credential":
        """Build from a token endpoint body; ``expires_in`` becomes absolute."""

        expires_at = payload.get("expires_at")
        if not expires_at:
            expires_in = payload.get("expires_in") or 0
            current = time.time() if now is None else now
            expires_at = current + float(expires_in)
        athlete = payload.get("athlete")
        return cls(
            access_token=str(payload.get("access_token") or ""),
            refresh_token=payload.get("refresh_token") or None,
            expires_at=float(expires_at),
            token_type=str(payload.get("token_type") or "Bearer"),
            athlete=dict(athlete) if isinstance(athlete, Mapping) else None,
        )

    def is_expired(self, now: Optional[float] = None) -> bool:
        current = time.time() if now is None else now
        return current >= self.expires_at

    def expiration_time(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)

    def time_until_expiration(self, now: Optional[float] = None) -> float:
        current = time.time() if now is None else now
        return self.expires_at - current


@dataclass(frozen=True)
class RateLimitInfo:
    """Quota telemetry observed on one response; ``None`` means absent."""

    limit: Optional[int] = None
    usage: Optional[int] = None
    reset: Optional[float] = None


@dataclass
class RequestSpec:
    method: str
    path: str
    params: Optional[Mapping[str, Any]] = None
    body: Any = None
    result: Any = JSON


@dataclass
class Pagination:
    page: int = 0
    per_page: int = 0
    after: int = 0
    before: int = 0

    def to_params(self) -> Dict[str, int]:
        return {
            key: value
            for key, value in (
                ("page", self.page),
                ("per_page", self.per_page),
                ("after", self.after),
                ("before", self.before),
            )
            if value > 0
        }


@dataclass
class Stream:
    type: str
    data: List[Any] = field(default_factory=list)
    series_type: str = ""
    original_size: int = 0
    resolution: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Stream":
        data = payload.get("data")
        return cls(
            type=str(payload.get("type") or ""),
            data=list(data) if isinstance(data, list) else [],
            series_type=str(payload.get("series_type") or ""),
            original_size=int(payload.get("original_size") or 0),
            resolution=str(payload.get("resolution") or ""),
        )


STREAM_TYPES = (
    "time",
    "distance",
    "latlng",
    "altitude",
    "velocity_smooth",
    "heartrate",
    "cadence",
    "watts",
    "temp",
    "moving",
    "grade_smooth",
)


@dataclass
class StreamSet:
    time: Optional[Stream] = None
    distance: Optional[Stream] = None
    latlng: Optional[Stream] = None
    altitude: Optional[Stream] = None
    velocity_smooth: Optional[Stream] = None
    heartrate: Optional[Stream] = None
    cadence: Optional[Stream] = None
    watts: Optional[Stream] = None
    temp: Optional[Stream] = None
    moving: Optional[Stream] = None
    grade_smooth: Optional[Stream] = None

    def present(self) -> List[str]:
        """Names of the stream types populated in this set."""

        return [f.name for f in fields(self) if getattr(self, f.name) is not None]


__all__ = [
    "JSON",
    "TEXT",
    "Credential",
    "RateLimitInfo",
    "RequestSpec",
    "Pagination",
    "Stream",
    "StreamSet",
    "STREAM_TYPES",
]
