import logging

from mathion.config import AppConfig, load_api_key, setup_logging
from mathion.provider import DEFAULT_MODEL_NAME


def clear_keys(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


def test_defaults_without_files(tmp_path, monkeypatch):
    clear_keys(monkeypatch)
    cfg = AppConfig.load(path=tmp_path / "missing.toml", env_path=tmp_path / ".env")
    assert cfg.gemini_api_key == ""
    assert not cfg.has_api_key
    assert cfg.model_name == DEFAULT_MODEL_NAME
    assert cfg.request_timeout is None
    assert cfg.log_level == "INFO"


def test_toml_overrides(tmp_path, monkeypatch):
    clear_keys(monkeypatch)
    toml_path = tmp_path / "config.toml"
    toml_path.write_text(
        "\n".join(
            [
                "[gemini]",
                'model = "gemini-2.0-flash"',
                "request_timeout = 15",
                "[storage]",
                f'path = "{(tmp_path / "scores.json").as_posix()}"',
                "[logging]",
                'level = "debug"',
            ]
        ),
        encoding="utf-8",
    )
    cfg = AppConfig.load(path=toml_path, env_path=tmp_path / ".env")
    assert cfg.model_name == "gemini-2.0-flash"
    assert cfg.request_timeout == 15.0
    assert cfg.storage_path == tmp_path / "scores.json"
    assert cfg.log_level == "DEBUG"


def test_zero_timeout_means_no_timeout():
    cfg = AppConfig()
    cfg.apply_toml({"gemini": {"request_timeout": 0}})
    assert cfg.request_timeout is None


def test_broken_toml_is_ignored(tmp_path, monkeypatch):
    clear_keys(monkeypatch)
    toml_path = tmp_path / "config.toml"
    toml_path.write_text("[gemini\nmodel = ", encoding="utf-8")
    cfg = AppConfig.load(path=toml_path, env_path=tmp_path / ".env")
    assert cfg.model_name == DEFAULT_MODEL_NAME


def test_env_beats_dotenv(tmp_path, monkeypatch):
    clear_keys(monkeypatch)
    env_path = tmp_path / ".env"
    env_path.write_text("GEMINI_API_KEY=from-file\n", encoding="utf-8")
    assert load_api_key(env_path) == "from-file"

    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert load_api_key(env_path) == "from-env"


def test_api_key_fallback_name(tmp_path, monkeypatch):
    clear_keys(monkeypatch)
    monkeypatch.setenv("API_KEY", "legacy")
    assert load_api_key(tmp_path / ".env") == "legacy"


def test_setup_logging_accepts_unknown_level(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
    setup_logging(AppConfig(log_level="nonsense"))
    assert calls["level"] == logging.INFO
