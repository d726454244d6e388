"""
tests/conftest.py
Shared fixtures for envedit tests.
Provides sample .env files in isolated temporary directories.
"""

import os

import pytest

MAIN_ENV = "\n".join([
    "# Comment A",
    "",
    "APP_NAME=MyApp # inline",
    "APP_ENV=production",
    "",
    "# DB Section",
    "DB_HOST=localhost",
    "DB_PORT=3306",
    "DEBUG=true",
    "",
    "PRIVATE_KEY=\"-----BEGIN---\nLINE1\nLINE2\n-----END---\"",
])

OTHER_ENV = "\n".join([
    "APP_NAME=MyApp",
    "APP_ENV=staging",
    "DB_USER=root",
    "REDIS_HOST=127.0.0.1",
])


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Keep ENVEDIT_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("ENVEDIT_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / "main.env"
    path.write_text(MAIN_ENV, encoding="utf-8")
    return path


@pytest.fixture
def other_file(tmp_path):
    path = tmp_path / "other.env"
    path.write_text(OTHER_ENV, encoding="utf-8")
    return path


@pytest.fixture
def write_env(tmp_path):
    """Factory: write *content* to tmp_path/<name> and return the path."""
    def _write(content: str, name: str = ".env"):
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return path
    return _write
