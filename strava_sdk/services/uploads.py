"""Upload status polling. Creating uploads needs multipart and is not offered."""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from .base import Service

Cancel = Optional[threading.Event]


class UploadsService(Service):
    def get_status(self, upload_id: int, cancel: Cancel = None) -> Dict[str, Any]:
        return self._dispatcher.get(f"/uploads/{upload_id}", result=dict, cancel=cancel)
