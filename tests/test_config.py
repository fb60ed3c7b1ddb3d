from pathlib import Path

import pytest

from method_catalog.config import load_settings
from method_catalog.errors import InitError
from method_catalog.store.catalog import MethodCatalog


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("REPO_URL", "BRANCH", "REFRESH_MINUTES", "CACHE_SIZE", "DYNAMIC_REPOS", "LOG_LEVEL"):
        monkeypatch.delenv(f"METHOD_CATALOG_{name}", raising=False)


class TestSettings:
    def test_defaults(self):
        settings = load_settings()
        assert settings.repo_url is None
        assert settings.branch == "master"
        assert settings.local_path == Path("./narrative_method_specs")
        assert settings.refresh_minutes == 2
        assert settings.cache_size == 1000
        assert settings.dynamic_repos == "memory"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("METHOD_CATALOG_REPO_URL", "https://example.org/specs.git")
        monkeypatch.setenv("METHOD_CATALOG_REFRESH_MINUTES", "0.5")
        monkeypatch.setenv("METHOD_CATALOG_DYNAMIC_REPOS", "none")
        settings = load_settings()
        assert settings.repo_url == "https://example.org/specs.git"
        assert settings.refresh_minutes == 0.5
        assert settings.dynamic_repos == "none"

    def test_invalid_value(self, monkeypatch):
        monkeypatch.setenv("METHOD_CATALOG_CACHE_SIZE", "0")
        with pytest.raises(InitError):
            load_settings()

    def test_unknown_override_rejected(self):
        with pytest.raises(InitError):
            load_settings(no_such_field=1)

    def test_catalog_requires_repo_url(self):
        with pytest.raises(InitError):
            MethodCatalog.from_settings(load_settings())
