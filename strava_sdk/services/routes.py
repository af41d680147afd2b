"""Route endpoints and GPX/TCX exports."""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from ..models import TEXT, Pagination
from .base import Service, page_params

Cancel = Optional[threading.Event]


class RoutesService(Service):
    def get(self, route_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get(f"/routes/{route_id}", result=dict, cancel=cancel)

    def get_gpx(self, route_id: int, cancel: Cancel = None) -> str:
        return self._dispatcher.get(
            f"/routes/{route_id}/export_gpx", result=TEXT, cancel=cancel
        )

    def get_tcx(self, route_id: int, cancel: Cancel = None) -> str:
        return self._dispatcher.get(
            f"/routes/{route_id}/export_tcx", result=TEXT, cancel=cancel
        )

    def list_by_athlete(
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
