"""Gear lookup (bikes and shoes)."""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from .base import Service

Cancel = Optional[threading.Event]


class GearService(Service):
    def get(self, gear_id: str, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get(f"/gear/{gear_id}", result=dict, cancel=cancel)
