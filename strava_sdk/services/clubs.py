"""Club endpoints."""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from ..models import Pagination
from .base import Service, page_params

Cancel = Optional[threading.Event]


class ClubsService(Service):
    def get(self, club_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get(f"/clubs/{club_id}", result=dict, cancel=cancel)

    def list_members(
        self, club_id: int, pagination: Optional[Pagination] = None, cancel: Cancel = None
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/clubs/{club_id}/members", page_params(pagination), result=list, cancel=cancel
        )

    def list_admins(
        self, club_id: int, pagination: Optional[Pagination] = None, cancel: Cancel = None
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/clubs/{club_id}/admins", page_params(pagination), result=list, cancel=cancel
        )

    def list_activities(
        self, club_id: int, pagination: Optional[Pagination] = None, cancel: Cancel = None
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            f"/clubs/{club_id}/activities",
            page_params(pagination),
            result=list,
            cancel=cancel,
        )

    def list_mine(
        self, pagination: Optional[Pagination] = None, cancel: Cancel = None
    ) -> List[Dict[str, Any]]:
        return self._dispatcher.get(
            "/athlete/clubs", page_params(pagination), result=list, cancel=cancel
        )

    def join(self, club_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.post(f"/clubs/{club_id}/join", result=dict, cancel=cancel)

    def leave(self, club_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.post(f"/clubs/{club_id}/leave", result=dict, cancel=cancel)
