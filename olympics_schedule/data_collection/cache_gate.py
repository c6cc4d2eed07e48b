"""
Cache Gate

Decides whether a previously persisted artifact is fresh enough to skip a new
rendering run. A TTL of 0 disables caching; any failure to read the artifact's
metadata counts as stale.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable, Optional

from olympics_schedule.common.constants import CacheDecision

logger = logging.getLogger("cache_gate")


class CacheGate:
    def __init__(
        self,
        ttl_seconds: int,
        *,
        clock: Callable[[], float] = time.time,
        mtime_lookup: Callable[[Path], float] = os.path.getmtime,
    ):
        self.ttl_seconds = max(0, int(ttl_seconds or 0))
        self.clock = clock
        self.mtime_lookup = mtime_lookup

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def decide(self, mtime: Optional[float]) -> CacheDecision:
        """FRESH when now - mtime < TTL, else STALE."""
        if not self.enabled or mtime is None:
            return CacheDecision.STALE
        age = self.clock() - mtime
        return CacheDecision.FRESH if age < self.ttl_seconds else CacheDecision.STALE

    def age_seconds(self, path: Path | str) -> Optional[float]:
        try:
            return self.clock() - self.mtime_lookup(Path(path))
        except Exception as e:
            logger.debug(f"No cache metadata for {path}: {e}")
            return None

    def check(self, path: Path | str) -> CacheDecision:
        if not self.enabled:
            return CacheDecision.STALE
        try:
            mtime = self.mtime_lookup(Path(path))
        except FileNotFoundError:
            logger.debug(f"No cached artifact at {path}")
            return CacheDecision.STALE
        except Exception as e:
            logger.warning(f"Cache check failed for {path}, continuing to scrape: {e}")
            return CacheDecision.STALE
        decision = self.decide(mtime)
        if decision is CacheDecision.FRESH:
            logger.info(
                f"Using cached {path} (age {round(self.clock() - mtime)}s < TTL {self.ttl_seconds}s), skipping scrape"
            )
        return decision
