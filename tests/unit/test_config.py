import pytest

from core.config import AppSettings, write_user_env_vars
from core.domain.runtime import Platform


@pytest.mark.unit
def test_defaults_match_request_policy():
    settings = AppSettings(_env_file=None)
    assert settings.request_timeout_seconds == 30.0
    assert settings.max_attempts == 3
    assert settings.backoff_seconds == 1.0
    assert settings.api_port == 5000
    assert settings.api_path_prefix == "/api"


@pytest.mark.unit
def test_env_prefix_is_applied(monkeypatch):
    monkeypatch.setenv("JOBWALA_API_URL", "https://api.jobwala.in/api")
    monkeypatch.setenv("JOBWALA_PLATFORM", "android")
    monkeypatch.setenv("JOBWALA_MAX_ATTEMPTS", "5")
    settings = AppSettings(_env_file=None)
    assert settings.api_url == "https://api.jobwala.in/api"
    assert settings.platform is Platform.ANDROID
    assert settings.max_attempts == 5


@pytest.mark.unit
def test_write_user_env_vars_merges_existing(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    write_user_env_vars({"JOBWALA_API_HOST": "192.168.1.5"}, env_path=env_path)
    write_user_env_vars({"JOBWALA_API_URL": "https://x/api"}, env_path=env_path)

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#")
    assert "JOBWALA_API_HOST=192.168.1.5" in lines
    assert "JOBWALA_API_URL=https://x/api" in lines


@pytest.mark.unit
def test_storage_path_defaults_to_user_config_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    settings = AppSettings(_env_file=None)
    assert settings.resolved_storage_path().name == "storage.json"
    assert tmp_path in settings.resolved_storage_path().parents
