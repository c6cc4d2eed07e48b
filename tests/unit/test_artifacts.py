import json

import pytest

from olympics_schedule.data_collection.artifacts import ArtifactWriter, athletes_file, schedule_file
from olympics_schedule.data_collection.fallback import fallback_schedule
from olympics_schedule.domain.contracts import DegradedAppearance, ExtractionError


def test_file_names():
    assert schedule_file() == "schedule.json"
    assert schedule_file("FIN") == "fin-schedule.json"
    assert athletes_file("FIN") == "fin-athletes.json"


def test_schedule_written_and_mirrored(tmp_path, clock):
    writer = ArtifactWriter(tmp_path / "public", tmp_path / "data", clock=clock)
    path = writer.write_schedule(fallback_schedule())
    assert path == tmp_path / "public" / "schedule.json"
    public = json.loads(path.read_text(encoding="utf-8"))
    mirrored = json.loads((tmp_path / "data" / "schedule.json").read_text(encoding="utf-8"))
    assert public == mirrored
    assert public[1] == {
        "date": "February 6, 2026",
        "events": [
            {
                "time": "13:00",
                "event": "Opening Ceremony",
                "sport": "Opening Ceremony",
                "venue": "Milano",
                "teams": "",
                "status": "SCHEDULED",
            }
        ],
    }
    assert [d.to_dict() for d in writer.read_schedule("schedule.json")] == public


def test_last_updated_uses_rome_offset(tmp_path, clock):
    writer = ArtifactWriter(tmp_path / "public", tmp_path / "data", clock=clock)
    path = writer.write_last_updated()
    assert json.loads(path.read_text(encoding="utf-8")) == {"iso": "2026-02-05T12:00:00+01:00"}
    assert (tmp_path / "data" / "last-updated.json").exists()


def test_degraded_athletes_shape(tmp_path, clock):
    writer = ArtifactWriter(tmp_path / "public", tmp_path / "data", clock=clock)
    path = writer.write_athletes([DegradedAppearance(athlete="Kalle Lehto", noc="FIN", url="https://x")], "FIN")
    assert path.name == "fin-athletes.json"
    assert json.loads(path.read_text(encoding="utf-8")) == [{"athlete": "Kalle Lehto", "noc": "FIN", "url": "https://x"}]


def test_mirror_failure_only_warns(tmp_path, clock, caplog):
    blocker = tmp_path / "data"
    blocker.write_text("not a directory", encoding="utf-8")
    writer = ArtifactWriter(tmp_path / "public", blocker, clock=clock)
    with caplog.at_level("WARNING"):
        writer.write_json("schedule.json", [])
    assert (tmp_path / "public" / "schedule.json").exists()
    assert "Could not mirror" in caplog.text


def test_unreadable_schedule_artifact_raises(tmp_path, clock):
    writer = ArtifactWriter(tmp_path / "public", tmp_path / "data", clock=clock)
    writer.write_json("schedule.json", {"not": "a list"})
    with pytest.raises(ExtractionError):
        writer.read_schedule("schedule.json")
