from functools import lru_cache
from typing import List
import logging

from pydantic import Field
from pydantic import field_validator
from pydantic import ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    env: str = Field("development", alias="ENV")
    api_prefix: str = Field("/api", alias="API_PREFIX")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    allowed_origins_raw: str | None = Field(None, alias="ALLOWED_ORIGINS")

    # Database
    database_url: str = Field("sqlite:///./gpt_launcher.db", alias="DATABASE_URL")

    # Admin surface (create/update/delete, catalog import/export)
    admin_token: str = Field("change-me", alias="ADMIN_TOKEN")

    # Optional YAML catalog loaded into an empty store on startup
    gpt_seed_path: str | None = Field(None, alias="GPT_SEED_PATH")

    # Listing order: the admin table shows newest first, the showcase oldest first
    admin_list_order: str = Field("desc", alias="ADMIN_LIST_ORDER")
    showcase_order: str = Field("asc", alias="SHOWCASE_ORDER")

    # Prompt building
    first_field_required: bool = Field(True, alias="FIRST_FIELD_REQUIRED")
    unmatched_token_policy: str = Field("keep", alias="UNMATCHED_TOKEN_POLICY")  # "keep" | "blank"
    max_fields_per_gpt: int = Field(50, alias="MAX_FIELDS_PER_GPT")

    @field_validator("admin_list_order", "showcase_order", mode="before")
    @classmethod
    def _validate_order(cls, v: str | None, info: ValidationInfo) -> str:
        val = (v or "").strip().lower()
        if val not in {"asc", "desc"}:
            raise ValueError(f"{info.field_name.upper()} must be 'asc' or 'desc'; got: {v!r}")
        return val

    @field_validator("unmatched_token_policy", mode="before")
    @classmethod
    def _validate_token_policy(cls, v: str | None) -> str:
        val = (v or "keep").strip().lower()
        valid = {"keep", "blank"}
        if val not in valid:
            raise ValueError(f"UNMATCHED_TOKEN_POLICY must be one of {sorted(valid)}; got: {v!r}")
        return val

    @field_validator("max_fields_per_gpt")
    @classmethod
    def _validate_max_fields(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("MAX_FIELDS_PER_GPT must be > 0")
        return int(v)

    @property
    def allowed_origins(self) -> List[str]:
        if self.allowed_origins_raw:
            return [item.strip() for item in self.allowed_origins_raw.split(",") if item.strip()]
        return ["http://localhost:5173"]


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()


def assert_secure_configuration() -> None:
    """Fail fast in non-development envs when unsafe defaults are detected."""
    log = logging.getLogger("launcher.core.config")
    env = (settings.env or "").strip().lower()
    if env in {"dev", "development", "local", "test"}:
        if settings.admin_token == "change-me":
            log.warning("Using default admin token in development; DO NOT use in production.")
        return

    problems: list[str] = []
    if settings.admin_token == "change-me":
        problems.append("ADMIN_TOKEN must be set to a strong secret")
    if len(settings.admin_token) < 16:
        problems.append("ADMIN_TOKEN must be at least 16 characters long")

    if problems:
        raise RuntimeError(
            "Insecure configuration detected for ENV!='development': " + "; ".join(problems)
        )


def resolve_project_path(p: str) -> str:
    """Resolve ``p`` to an absolute path relative to the backend directory when needed."""
    from pathlib import Path as _Path  # local import to keep public surface minimal

    raw = _Path(p)
    if raw.is_absolute():
        return str(raw)
    base = _Path(__file__).resolve().parents[3]  # …/backend
    return str((base / raw).resolve())
