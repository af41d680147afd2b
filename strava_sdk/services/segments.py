"""Segment and segment effort endpoints."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..models import Pagination
from .base import Service, page_params

Cancel = Optional[threading.Event]

DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class SegmentsService(Service):
    def get(self, segment_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get(f"/segments/{segment_id}", result=dict, cancel=cancel)

    def star(
        self, segment_id: int, starred: bool = True, cancel: Cancel = None
    ) -> Dict[str, Any]:
        return self._dispatcher.put(
            f"/segments/{segment_id}/starred",
            {"starred": starred},
            result=dict,
            cancel=cancel,
        )

    def list_starred(
        self, pagination: Optional[Pagination] = None, cancel: Cancel = None
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            "/segments/starred", page_params(pagination), result=list, cancel=cancel
        )

    def list_efforts(
        self,
        segment_id: int,
        *,
        athlete_id: int = 0,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        per_page: int = 0,
        cancel: Cancel = None,
    ) -> List[Dict[str, Any]]:
        """Efforts on a segment by the authenticated athlete, optionally windowed."""

        params = page_params(
            None,
            athlete_id=athlete_id,
            start_date_local=start_date.strftime(DATE_FORMAT) if start_date else None,
            end_date_local=end_date.strftime(DATE_FORMAT) if end_date else None,
            per_page=per_page,
        )
        return self._dispatcher.get(
            f"/segments/{segment_id}/all_efforts", params, result=list, cancel=cancel
        )

    def get_leaderboard(
        self,
        segment_id: int,
        *,
        gender: str = "",
        age_group: str = "",
        weight_class: str = "",
        following: bool = False,
        club_id: int = 0,
        date_range: str = "",
        context_entries: int = 0,
        pagination: Optional[Pagination] = None,
        cancel: Cancel = None,
    ) -> Dict[str, Any]:
        params = page_params(
            pagination,
            gender=gender or None,
            age_group=age_group or None,
            weight_class=weight_class or None,
            following=True if following else None,
            club_id=club_id,
            date_range=date_range or None,
            context_entries=context_entries,
        )
        return self._dispatcher.get(
            f"/segments/{segment_id}/leaderboard", params, result=dict, cancel=cancel
        )

    def explore(
        self,
        bounds: Sequence[float],
        *,
        activity_type: str = "",
        min_cat: int = 0,
        max_cat: int = 0,
        cancel: Cancel = None,
    ) -> Dict[str, Any]:
        """Segments inside ``bounds`` (SW lat, SW lng, NE lat, NE lng)."""

        if len(bounds) != 4:
            raise ValueError("bounds must be [sw_lat, sw_lng, ne_lat, ne_lng]")
        params = page_params(
            None,
            bounds=[repr(float(value)) for value in bounds],
            activity_type=activity_type or None,
            min_cat=min_cat,
            max_cat=max_cat,
        )
        return self._dispatcher.get(
            "/segments/explore", params, result=dict, cancel=cancel
        )


class SegmentEffortsService(Service):
    def get(self, effort_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get(
            f"/segment_efforts/{effort_id}", result=dict, cancel=cancel
        )
