"""
Process settings for vds.

All values come from environment variables prefixed ``VDS_`` (or a
``.env`` file).  The store connection additionally honours the unprefixed
``DOLT_HOST`` / ``DOLT_PORT`` / ``DOLT_USER`` / ``DOLT_PASSWORD`` /
``DOLT_DATABASE`` variables so existing Dolt deployments keep working.

Order of precedence (highest → lowest):
    1. Keyword arguments (tests)
    2. Environment variables
    3. ``.env`` file
    4. Defaults below

Tags:
    settings, configuration, pydantic, environment, vds

Doc-Types:
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(name: str) -> AliasChoices:
    return AliasChoices(f"VDS_{name}", name)


class VdsSettings(BaseSettings):
    """Settings for the vds API, MCP server and CLI.

    Fields
    ──────
    host / port         : REST bind address
    mcp_port            : MCP streamable-http port
    dolt_*              : versioned store connection
    pool_*              : dedicated-session pool sizing
    trunk_branch        : branch every mutation merges into
    branch_prefix       : naming convention for mutation branches
    merge_lock_*        : store-wide merge lock name and bounded wait
    sweep_on_startup    : delete orphaned mutation branches before serving
    """

    model_config = SettingsConfigDict(
        env_prefix="VDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, description="REST bind port")
    mcp_port: int = Field(default=8100, description="MCP streamable-http port")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool | None = Field(
        default=None,
        description="Force JSON (true) or console (false) logs; auto when unset",
    )

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="", description="URL prefix for all endpoints")
    api_title: str = Field(default="vds API", description="OpenAPI title")
    api_version: str = Field(default="0.3.0", description="OpenAPI version string")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # ── Versioned store ──────────────────────────────────────────────────
    dolt_host: str = Field(default="127.0.0.1", validation_alias=_env("DOLT_HOST"))
    dolt_port: int = Field(default=3306, validation_alias=_env("DOLT_PORT"))
    dolt_user: str = Field(default="root", validation_alias=_env("DOLT_USER"))
    dolt_password: str = Field(default="", validation_alias=_env("DOLT_PASSWORD"))
    dolt_database: str = Field(default="vds", validation_alias=_env("DOLT_DATABASE"))

    # ── Session pool ─────────────────────────────────────────────────────
    pool_size: int = Field(default=10, description="Pooled dedicated sessions")
    pool_max_overflow: int = Field(default=0, description="Sessions allowed beyond pool_size")
    pool_timeout_s: float = Field(default=30.0, description="Max wait for a free session")

    # ── Branched mutations ───────────────────────────────────────────────
    trunk_branch: str = Field(default="main", description="Trunk line mutations merge into")
    branch_prefix: str = Field(default="vds-mut-", description="Mutation branch name prefix")
    merge_lock_name: str = Field(default="vds_merge", description="Store-wide merge lock name")
    merge_lock_timeout_ms: int = Field(
        default=10_000,
        description="Bounded wait for the merge lock in milliseconds",
    )
    sweep_on_startup: bool = Field(
        default=True,
        description="Delete orphaned mutation branches before accepting traffic",
    )

    @field_validator("pool_size", "merge_lock_timeout_ms")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("pool_max_overflow")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("branch_prefix")
    @classmethod
    def _prefix_shape(cls, value: str) -> str:
        if not value or "%" in value or "_" in value:
            raise ValueError("branch prefix must be non-empty and free of LIKE wildcards")
        return value

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for the versioned store."""
        auth = quote_plus(self.dolt_user)
        if self.dolt_password:
            auth += ":" + quote_plus(self.dolt_password)
        return (
            f"mysql+mysqlconnector://{auth}@{self.dolt_host}:{self.dolt_port}"
            f"/{self.dolt_database}"
        )

    @property
    def merge_lock_timeout_s(self) -> float:
        return self.merge_lock_timeout_ms / 1000


@lru_cache(maxsize=1)
def get_settings() -> VdsSettings:
    """Cached settings — loaded once per process."""
    return VdsSettings()
