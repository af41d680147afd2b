"""Activity endpoints."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ..models import Pagination
from .base import Service, page_params

Cancel = Optional[threading.Event]

DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class ActivitiesService(Service):
    def list(
        self,
        before: int = 0,
        after: int = 0,
        pagination: Optional[Pagination] = None,
        cancel: Cancel = None,
    ) -> List[Dict[str, Any]]:
        """Activities of the authenticated athlete, newest first."""

        params = page_params(pagination, before=before, after=after)
        return self._dispatcher.get(
            "/athlete/activities", params, result=list, cancel=cancel
        )

    def get(
        self, activity_id: int, include_all_efforts: bool = False, cancel: Cancel = None
    ) -> Dict[str, Any]:
        params = {"include_all_efforts": True} if include_all_efforts else None
        return self._dispatcher.get(
            f"/activities/{activity_id}", params, result=dict, cancel=cancel
        )

    def create(
        self,
        name: str,
        activity_type: str,
        start_date_local: datetime,
        elapsed_time: int,
        *,
        sport_type: str = "",
        description: str = "",
        distance: float = 0.0,
        trainer: bool = False,
        commute: bool = False,
        cancel: Cancel = None,
    ) -> Dict[str, Any]:
        """Create a manual activity."""

        form: Dict[str, Any] = {
            "name": name,
            "type": activity_type,
            "start_date_local": start_date_local.strftime(DATE_FORMAT),
            "elapsed_time": str(elapsed_time),
        }
        if sport_type:
            form["sport_type"] = sport_type
        if description:
            form["description"] = description
        if distance > 0:
            form["distance"] = f"{distance:.2f}"
        if trainer:
            form["trainer"] = True
        if commute:
            form["commute"] = True
        return self._dispatcher.post("/activities", form, result=dict, cancel=cancel)

    def update(
        self, activity_id: int, changes: Mapping[str, Any], cancel: Cancel = None
    ) -> Dict[str, Any]:
        return self._dispatcher.put(
            f"/activities/{activity_id}", dict(changes), result=dict, cancel=cancel
        )

    def delete(self, activity_id: int, cancel: Cancel = None) -> None:
        self._dispatcher.delete(f"/activities/{activity_id}", cancel=cancel)

    def list_comments(
        self,
        activity_id: int,
        pagination: Optional[Pagination] = None,
        cancel: Cancel = None,
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/activities/{activity_id}/comments",
            page_params(pagination),
            result=list,
            cancel=cancel,
        )

    def list_kudos(
        self,
        activity_id: int,
        pagination: Optional[Pagination] = None,
        cancel: Cancel = None,
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/activities/{activity_id}/kudos",
            page_params(pagination),
            result=list,
            cancel=cancel,
        )

    def list_laps(self, activity_id: int, cancel: Cancel = None) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/activities/{activity_id}/laps", result=list, cancel=cancel
        )

    def get_zones(self, activity_id: int, cancel: Cancel = None) -> Any:
        return self._dispatcher.get(f"/activities/{activity_id}/zones", cancel=cancel)

    def list_related(
        self,
        activity_id: int,
        pagination: Optional[Pagination] = None,
        cancel: Cancel = None,
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/activities/{activity_id}/related",
            page_params(pagination),
            result=list,
            cancel=cancel,
        )

    def get_feed(
        self, pagination: Optional[Pagination] = None, cancel: Cancel = None
    ) -> List[Dict[str, Any]]:
        """Activities of athletes the authenticated athlete follows."""

        return self._dispatcher.get(
            "/activities/following", page_params(pagination), result=list, cancel=cancel
        )

    def create_comment(
        self, activity_id: int, text: str, cancel: Cancel = None
    ) -> Dict[str, Any]:
        return self._dispatcher.post(
            f"/activities/{activity_id}/comments",
            {"text": text},
            result=dict,
            cancel=cancel,
        )

    def give_kudos(self, activity_id: int, cancel: Cancel = None) -> None:
        self._dispatcher.post(
            f"/activities/{activity_id}/kudos", result=None, cancel=cancel
        )
