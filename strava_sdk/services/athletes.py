"""Athlete endpoints."""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from ..models import Pagination
from .base import Service, page_params

Cancel = Optional[threading.Event]


class AthletesService(Service):
    def get_current(self, cancel: Cancel = None) -> Dict[str, Any]:
        """The athlete the access token belongs to."""

        return self._dispatcher.get("/athlete", result=dict, cancel=cancel)

    def get(self, athlete_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get(f"/athletes/{athlete_id}", result=dict, cancel=cancel)

    def update_weight(self, weight: float, cancel: Cancel = None) -> Dict[str, Any]:
        """Set the authenticated athlete's weight in kilograms."""

        return self._dispatcher.put(
            "/athlete", {"weight": weight}, result=dict, cancel=cancel
        )

    def get_stats(self, athlete_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get(
            f"/athletes/{athlete_id}/stats", result=dict, cancel=cancel
        )

    def list_zones(self, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get("/athlete/zones", result=dict, cancel=cancel)

    def list_activities(
        self,
        athlete_id: int,
        before: int = 0,
        after: int = 0,
        pagination: Optional[Pagination] = None,
        cancel: Cancel = None,
    ) -> List[Dict[str, Any]]:
        params = page_params(pagination, before=before, after=after)
        return self._dispatcher.get(
            f"/athletes/{athlete_id}/activities", params, result=list, cancel=cancel
        )

    def list_koms(
        self,
        athlete_id: int,
        pagination: Optional[Pagination] = None,
        cancel: Cancel = None,
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/athletes/{athlete_id}/koms",
            page_params(pagination),
            result=list,
            cancel=cancel,
        )

    def list_routes(
        self,
        athlete_id: int,
        pagination: Optional[Pagination] = None,
        cancel: Cancel = None,
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/athletes/{athlete_id}/routes",
            page_params(pagination),
            result=list,
            cancel=cancel,
        )
