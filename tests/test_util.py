from datetime import date
from pathlib import Path

from stepsafe.util import hour_after, redact_url, slugify, yesterday_of
from stepsafe.util.filesystem import read_json_file, write_text_file


def test_hour_after_rounds_to_next_hour() -> None:
    assert hour_after("17:30") == "18:00"
    assert hour_after("09:00") == "10:00"
    assert hour_after("23:45") == "00:00"


def test_yesterday_of_crosses_month_boundary() -> None:
    assert yesterday_of(date(2026, 3, 1)) == date(2026, 2, 28)


def test_slugify() -> None:
    assert slugify("Phoenix, AZ") == "phoenix-az"
    assert slugify("  ").startswith("profile-")


def test_redact_url_hides_api_keys() -> None:
    redacted = redact_url("https://maps.googleapis.com/maps/api/geocode/json?address=x&key=secret123")

    assert "secret123" not in redacted


def test_write_then_read_json(tmp_path) -> None:
    target = tmp_path / "nested" / "data.json"

    write_text_file(target, '{"ok": true}')

    assert read_json_file(target) == {"ok": True}
    assert read_json_file(tmp_path / "missing.json") is None


def test_unreadable_json_is_left_in_place(tmp_path, monkeypatch) -> None:
    target = tmp_path / "data.json"
    target.write_text('{"ok": true}', encoding="utf-8")
    original_read_text = Path.read_text

    def failing_read_text(self, *args, **kwargs):
        if self.name == "data.json":
            raise PermissionError("denied")
        return original_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", failing_read_text)
    assert read_json_file(target) is None
    monkeypatch.undo()

    assert read_json_file(target) == {"ok": True}


def test_corrupt_json_is_deleted(tmp_path) -> None:
    target = tmp_path / "data.json"
    target.write_text("{broken", encoding="utf-8")

    assert read_json_file(target) is None
    assert not target.exists()
