"""Photo retrieval: search/random sources, content validation and the daily quota."""
from .pipeline import PhotoRetrievalPipeline
from .quota import DailyQuotaCounter, QuotaState
from .request import parse_photo_request
from .types import PhotoRequest, ProgressEvent, QueryMode, RandomMode

__all__ = [
    "DailyQuotaCounter",
    "PhotoRequest",
    "PhotoRetrievalPipeline",
    "ProgressEvent",
    "QueryMode",
    "QuotaState",
    "RandomMode",
    "parse_photo_request",
]
