"""
Tests for settings loading and precedence.
"""

import pytest
from omegaconf.errors import ConfigKeyError

from pdf_workbench_backend.configuration import DEFAULTS, find_config_path, make_runtime_config


@pytest.fixture
def no_env(monkeypatch):
    for variable in ("AUTH_PASSWORD", "CORS_ORIGINS", "UPLOAD_DIR", "STATIC_DIR", "MAX_UPLOAD_MB", "MAX_DOCUMENTS", "LOG_LEVEL"):
        monkeypatch.delenv(variable, raising=False)


def test_yaml_overrides_defaults(tmp_path, no_env):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("title:\n  font_size: 30\nexport:\n  filename: out.pdf\n", encoding="utf-8")

    settings = make_runtime_config(config_path=config_file)
    assert settings.title.font_size == 30
    assert settings.export.filename == "out.pdf"
    assert settings.page.width == DEFAULTS["page"]["width"]


def test_environment_overrides_yaml(tmp_path, monkeypatch, no_env):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("auth:\n  password: from-yaml\n", encoding="utf-8")
    monkeypatch.setenv("AUTH_PASSWORD", "from-env")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.example, http://b.example")
    monkeypatch.setenv("MAX_UPLOAD_MB", "5")
    monkeypatch.setenv("MAX_DOCUMENTS", "8")

    settings = make_runtime_config(config_path=config_file)
    assert settings.auth.password == "from-env"
    assert list(settings.server.cors_origins) == ["http://a.example", "http://b.example"]
    assert settings.server.max_upload_mb == 5
    assert settings.server.max_documents == 8


def test_explicit_overrides_win(tmp_path, monkeypatch, no_env):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("{}\n", encoding="utf-8")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    settings = make_runtime_config({"logging": {"level": "DEBUG"}}, config_path=config_file)
    assert settings.logging.level == "DEBUG"


def test_unknown_keys_are_rejected(tmp_path, no_env):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("page:\n  widht: 100\n", encoding="utf-8")

    with pytest.raises(ConfigKeyError):
        make_runtime_config(config_path=config_file)


def test_explicit_config_path_must_exist(tmp_path, monkeypatch):
    monkeypatch.setenv("PDF_WORKBENCH_CONFIG", str(tmp_path / "missing.yaml"))
    with pytest.raises(FileNotFoundError):
        find_config_path()


def test_explicit_config_path_is_used(tmp_path, monkeypatch):
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("{}\n", encoding="utf-8")
    monkeypatch.setenv("PDF_WORKBENCH_CONFIG", str(config_file))
    assert find_config_path() == config_file
