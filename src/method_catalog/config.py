"""Runtime settings read from ``METHOD_CATALOG_*`` environment variables."""

from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from method_catalog.errors import InitError


class CatalogSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="METHOD_CATALOG_", extra="forbid")

    repo_url: str | None = Field(default=None, description="Content repository to clone")
    branch: str = Field(default="master", description="Branch of the content repository")
    local_path: Path = Field(
        default=Path("./narrative_method_specs"),
        description="Snapshot directory, wiped and re-cloned on start",
    )
    refresh_minutes: float = Field(default=2, gt=0, description="Minimum time between pulls")
    cache_size: int = Field(default=1000, gt=0, description="Entries per read-through cache")
    temp_dir: Path | None = Field(default=None, description="Where dynamic repos are cloned")
    dynamic_repos: Literal["memory", "none"] = Field(
        default="memory", description="Dynamic repository registry backend"
    )
    pull_timeout: float | None = Field(
        default=None, gt=0, description="Seconds before a hanging git pull is killed"
    )
    log_level: str = Field(default="INFO", description="Logging level for the CLI")


def load_settings(**overrides) -> CatalogSettings:
    """Build settings from the environment, failing fast with InitError."""
    try:
        return CatalogSettings(**overrides)
    except ValidationError as exc:
        msg = f"Invalid catalog settings: {exc}"
        raise InitError(msg) from exc
