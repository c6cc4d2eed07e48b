"""
Artifact persistence

Writes the published JSON artifacts into the public directory and mirrors them
into the data directory used by local development:

- schedule.json (unfiltered run)
- <noc>-schedule.json / <noc>-athletes.json (nationality-filtered run)
- last-updated.json: {"iso": "<timestamp with source-zone offset>"}

A failing public write propagates; mirror and last-updated failures only warn.
Reads fall back to the data-dir copy when the public artifact is missing.
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from olympics_schedule.common.parsing import iso_with_offset, now_in
from olympics_schedule.domain.contracts import DaySchedule, schedules_from_json, serialize_items

logger = logging.getLogger("artifacts")

SCHEDULE_FILE = "schedule.json"
LAST_UPDATED_FILE = "last-updated.json"


def schedule_file(noc: Optional[str] = None) -> str:
    return f"{noc.lower()}-schedule.json" if noc else SCHEDULE_FILE


def athletes_file(noc: str) -> str:
    return f"{noc.lower()}-athletes.json"


class ArtifactWriter:
    def __init__(
        self,
        public_dir: Path | str,
        data_dir: Path | str,
        *,
        tz_name: str = "Europe/Rome",
        clock: Callable[[], datetime] | None = None,
    ):
        self.public_dir = Path(public_dir)
        self.data_dir = Path(data_dir)
        self.tz_name = tz_name
        self.clock = clock or (lambda: now_in(tz_name))

    @classmethod
    def from_settings(cls, settings, clock: Callable[[], datetime] | None = None) -> "ArtifactWriter":
        return cls(settings.public_dir, settings.data_dir, tz_name=settings.source_timezone, clock=clock)

    def public_path(self, name: str) -> Path:
        return self.public_dir / name

    def data_path(self, name: str) -> Path:
        return self.data_dir / name

    @staticmethod
    def _dump(path: Path, payload: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

    def write_json(self, name: str, payload: Any) -> Path:
        """Write *payload* to the public dir and mirror it; returns the public path."""
        path = self.public_path(name)
        self._dump(path, payload)
        self.mirror(name)
        return path

    def mirror(self, name: str) -> Optional[Path]:
        """Copy a public artifact into the data dir (falls back to re-writing its text)."""
        src, dst = self.public_path(name), self.data_path(name)
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dst)
            return dst
        except OSError as e:
            logger.debug(f"Copy {src} -> {dst} failed ({e}); writing contents instead")
        try:
            dst.write_text(src.read_text(encoding="utf-8"), encoding="utf-8")
            return dst
        except OSError as e:
            logger.warning(f"Could not mirror {name} into {self.data_dir}: {e}")
            return None

    def cached_path(self, name: str) -> Path:
        """Public artifact, or its data-dir copy when only that one exists."""
        public, data = self.public_path(name), self.data_path(name)
        if public.exists() or not data.exists():
            return public
        return data

    def restore(self, name: str) -> Optional[Path]:
        """Copy a data-dir artifact back into the public dir, keeping its mtime."""
        src, dst = self.data_path(name), self.public_path(name)
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)
            return dst
        except OSError as e:
            logger.warning(f"Could not restore {name} into {self.public_dir}: {e}")
            return None

    def write_schedule(self, schedule: list[DaySchedule], noc: Optional[str] = None) -> Path:
        path = self.write_json(schedule_file(noc), serialize_items(schedule))
        logger.info(f"Saved {len(schedule)} days of schedule to {path}")
        return path

    def write_athletes(self, athletes: list, noc: str) -> Path:
        path = self.write_json(athletes_file(noc), serialize_items(athletes))
        logger.info(f"Saved {len(athletes)} athlete entries to {path}")
        return path

    def last_updated_payload(self) -> dict[str, str]:
        return {"iso": iso_with_offset(self.clock(), self.tz_name)}

    def write_last_updated(self) -> Optional[Path]:
        try:
            return self.write_json(LAST_UPDATED_FILE, self.last_updated_payload())
        except OSError as e:
            logger.warning(f"Could not write {LAST_UPDATED_FILE}: {e}")
            return None

    def read_schedule(self, name: str) -> list[DaySchedule]:
        with open(self.cached_path(name), encoding="utf-8") as f:
            return schedules_from_json(json.load(f))


__all__ = ["ArtifactWriter", "schedule_file", "athletes_file", "SCHEDULE_FILE", "LAST_UPDATED_FILE"]
