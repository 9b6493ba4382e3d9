from pathlib import Path

import pytest

from config import Settings
from core.exceptions import ConfigurationError


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults():
    settings = make_settings()
    params = settings.get_connection_params()
    assert params.host == "localhost"
    assert params.port == 3306
    assert params.user == "root"
    assert params.socket is None


def test_environment(monkeypatch):
    monkeypatch.setenv("MYSQL_HOST", "db.internal")
    monkeypatch.setenv("MYSQL_PORT", "3310")
    monkeypatch.setenv("MYSQL_SOCKET", "")

    params = make_settings().get_connection_params()
    assert params.host == "db.internal"
    assert params.port == 3310
    assert params.socket is None


@pytest.mark.parametrize("overrides", [{"MYSQL_USER": ""}, {"MYSQL_PORT": 0}, {"MYSQL_PORT": 70000}])
def test_invalid_connection_settings(overrides):
    with pytest.raises(ConfigurationError):
        make_settings(**overrides).get_connection_params()


def test_paths(tmp_path: Path):
    settings = make_settings(DUMPS_ROOT=str(tmp_path))
    slim = settings.get_output_path(settings.SLIM_DIR)
    assert slim == tmp_path / "slim"
    assert slim.is_dir()
    assert settings.get_exclusions_path() == tmp_path / "config" / "exclude-tables.txt"
    assert settings.resolve("/abs/full") == Path("/abs/full")


def test_progress_policy():
    policy = make_settings(PROGRESS_INTERVAL=0.5, EXPORT_PROGRESS_CAP=90).get_progress_policy()
    assert policy.interval == 0.5
    assert policy.cap == 90
