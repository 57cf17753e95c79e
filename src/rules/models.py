from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class AnalyticsRules(BaseModel):
    retention_days: int = Field(30, ge=1)
    dedupe_window_ms: int = Field(2000, ge=0)
    default_days: int = Field(7, ge=1)
    max_days: int = Field(365, ge=1)
    comparison_windows: list[int] = Field(default_factory=lambda: [7, 30])
    write_lock_timeout_seconds: float = Field(5.0, gt=0)
    timezone: str = "Asia/Jakarta"

    @field_validator("comparison_windows")
    @classmethod
    def _two_windows(cls, v: list[int]) -> list[int]:
        if len(v) != 2 or any(d < 1 for d in v):
            raise ValueError("comparison_windows must list two windows of >= 1 day")
        return v


class CorsRules(BaseModel):
    allowed_origins: list[str]
    allow_credentials: bool = True


class AuthCookieRules(BaseModel):
    name: str = "auth_token"
    secure: bool = False
    http_only: bool = True
    same_site: Literal["lax", "strict", "none"] = "lax"


class AuthRules(BaseModel):
    token_ttl_minutes: int = Field(60 * 24, ge=1)
    cookie: AuthCookieRules = Field(default_factory=AuthCookieRules)


class OpsRules(BaseModel):
    data_dir_required: bool = True
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    analytics: AnalyticsRules
    cors: CorsRules
    auth: AuthRules
    ops: OpsRules
