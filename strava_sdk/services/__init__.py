"""Thin resource services layered on the request dispatcher."""

from .activities import ActivitiesService
from .athletes import AthletesService
from .base import iter_pages
from .clubs import ClubsService
from .gear import GearService
from .routes import RoutesService
from .segments import SegmentEffortsService, SegmentsService
from .streams import StreamsService, decode_stream_set
from .uploads import UploadsService

__all__ = [
    "ActivitiesService",
    "AthletesService",
    "ClubsService",
    "GearService",
    "RoutesService",
    "SegmentEffortsService",
    "SegmentsService",
    "StreamsService",
    "UploadsService",
    "decode_stream_set",
    "iter_pages",
]
