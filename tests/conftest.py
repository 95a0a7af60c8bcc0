from pathlib import Path
import textwrap

import pytest
from typer.testing import CliRunner

from stepsafe.config import UserProfile


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def sample_config(tmp_path: Path) -> dict:
    """
    Write a small profile configuration for tests and return metadata.
    """
    output_root = tmp_path / "site"
    data_dir = tmp_path / "data"
    config_text = textwrap.dedent(
        f"""
        output_root = "{output_root.as_posix()}"
        data_dir = "{data_dir.as_posix()}"
        llm = "gpt-4o-mini"

        [[profile]]
        id = "alex"
        city = "Phoenix, AZ"
        lat = 33.45
        lon = -112.07
        timezone = "America/Phoenix"
        commute_type = "Walk"

        [profile.routine]
        morning_commute_start = "07:30"
        work_hours_start = "08:30"
        evening_commute_start = "17:30"

        [profile.sensitivities]
        heat = "High"
        aqi = "Medium"

        [[profile]]
        city = "Seattle"
        """
    ).strip()
    path = tmp_path / "config.toml"
    path.write_text(config_text + "\n", encoding="utf-8")
    return {"path": path, "output_root": output_root, "data_dir": data_dir}


@pytest.fixture
def walker() -> UserProfile:
    return UserProfile.model_validate(
        {
            "id": "walker",
            "location": {"city": "Phoenix, AZ", "lat": 33.45, "lon": -112.07, "timezone": "America/Phoenix"},
            "routine": {
                "morning_commute_start": "07:30",
                "work_hours_start": "08:30",
                "evening_commute_start": "17:30",
            },
            "commute_type": "Walk",
            "sensitivities": {"heat": "High", "aqi": "Yes"},
        }
    )
