from __future__ import annotations
from enum import Enum


class SightingSource(str, Enum):
    DAY_API = "day-api"
    NETWORK = "network"
    DOM = "dom"


class EventStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN PROGRESS"
    FINISHED = "FINISHED"


class CacheDecision(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
