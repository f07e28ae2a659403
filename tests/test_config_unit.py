import logging

import pytest

from equasolver import config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "EQUASOLVER_LOG_LEVEL",
        "EQUASOLVER_SYSTEM_MAX_ITERATIONS",
        "EQUASOLVER_SYSTEM_TOLERANCE",
        "EQUASOLVER_CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    settings = config.load_settings()
    assert settings.log_level == "WARNING"
    assert settings.system_max_iterations == 100
    assert settings.system_tolerance == 1e-7
    assert settings.cors_origins == ["*"]


def test_environment_overrides(clean_env) -> None:
    clean_env.setenv("EQUASOLVER_SYSTEM_MAX_ITERATIONS", "25")
    clean_env.setenv("EQUASOLVER_SYSTEM_TOLERANCE", "1e-9")
    clean_env.setenv("EQUASOLVER_CORS_ORIGINS", "http://localhost:5173, https://example.org,")
    settings = config.load_settings()
    assert settings.system_max_iterations == 25
    assert settings.system_tolerance == 1e-9
    assert settings.cors_origins == ["http://localhost:5173", "https://example.org"]


@pytest.mark.parametrize("name,value", [
    ("EQUASOLVER_SYSTEM_MAX_ITERATIONS", "0"),
    ("EQUASOLVER_SYSTEM_TOLERANCE", "-1"),
    ("EQUASOLVER_SYSTEM_TOLERANCE", "abc"),
])
def test_invalid_values(clean_env, name, value) -> None:
    clean_env.setenv(name, value)
    with pytest.raises(ValueError):
        config.load_settings()


def test_configure_logging_uses_level(clean_env) -> None:
    calls = []
    clean_env.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    config.configure_logging(config.Settings(log_level="debug"))
    assert calls == [{"level": logging.DEBUG, "format": config.LOG_FORMAT}]


def test_configure_logging_unknown_level_falls_back(clean_env) -> None:
    calls = []
    clean_env.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    config.configure_logging(config.Settings(log_level="chatty"))
    assert calls[0]["level"] == logging.WARNING
