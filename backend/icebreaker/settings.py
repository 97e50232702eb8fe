"""Settings for the Icebreaker matching core."""

from __future__ import annotations

import json
from typing import Annotated, Dict, Literal, Optional, Tuple

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

RADIUS_MIN = 5
RADIUS_MAX = 50


def _env_field(default, *env_names: str, **constraints):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias, **constraints)
    return Field(default=default, **constraints)


class Settings(BaseSettings):
    # Radar defaults
    default_visibility_range: int = _env_field(20, "DEFAULT_VISIBILITY_RANGE", ge=RADIUS_MIN, le=RADIUS_MAX)
    # Users whose last broadcast is older than this are hidden from every radar
    auto_expire_seconds: float = _env_field(300.0, "AUTO_EXPIRE_SECONDS", "AUTO_EXPIRE_WINDOW", gt=0)
    expiry_sweep_interval_seconds: float = _env_field(30.0, "EXPIRY_SWEEP_INTERVAL_SECONDS", gt=0)
    # Expired users still silent this long after expiry are dropped from every store
    purge_after_seconds: float = _env_field(3600.0, "PURGE_AFTER_SECONDS", gt=0)

    # Scoring
    category_weights: Annotated[Dict[str, float], NoDecode] = _env_field({}, "CATEGORY_WEIGHTS")
    category_priority: Annotated[Tuple[str, ...], NoDecode] = _env_field(
        ("interests", "goals", "lifestyle", "books", "food", "daily"), "CATEGORY_PRIORITY"
    )
    highlight_count: int = _env_field(3, "HIGHLIGHT_COUNT", ge=0)

    # Ranking
    best_match_threshold: float = _env_field(70.0, "BEST_MATCH_THRESHOLD", ge=0, le=100)
    match_page_size: int = _env_field(20, "MATCH_PAGE_SIZE", ge=1, le=200)
    min_match_score: float = _env_field(0.0, "MIN_MATCH_SCORE", ge=0, le=100)
    # "allow": invisible callers may still query; "reject": NotDiscoverable is raised
    not_discoverable_policy: Literal["allow", "reject"] = _env_field("allow", "NOT_DISCOVERABLE_POLICY")

    # Store contention
    store_lock_timeout_seconds: float = _env_field(0.5, "STORE_LOCK_TIMEOUT_SECONDS", gt=0)
    store_lock_attempts: int = _env_field(3, "STORE_LOCK_ATTEMPTS", ge=1)

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(0.1, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("icebreaker-core", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
    obs_admin_token: Optional[str] = _env_field(None, "OBS_ADMIN_TOKEN")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    def is_prod(self) -> bool:
        return self.environment.lower() in ("prod", "production", "live")

    def is_dev(self) -> bool:
        return self.environment.lower() in ("dev", "development")

    def weight_for(self, category: str) -> float:
        return float(self.category_weights.get(category, 1.0))

    def priority_of(self, category: str) -> int:
        try:
            return self.category_priority.index(category)
        except ValueError:
            return len(self.category_priority)

    @field_validator("category_weights", mode="before")
    def _parse_weights(cls, value):  # type: ignore[override]
        """Normalise category weights from env or JSON.

        Supports:
        - empty / missing -> {}
        - JSON object string (e.g. '{"interests": 2}')
        - comma-separated pairs (e.g. 'interests:2,goals:0.5')
        - mapping -> lower-cased keys
        """
        if value in (None, ""):
            return {}
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("{"):
                value = json.loads(text)
            else:
                parsed: Dict[str, float] = {}
                for part in text.split(","):
                    if not part.strip():
                        continue
                    name, _, weight = part.partition(":")
                    parsed[name.strip()] = float(weight or 1.0)
                value = parsed
        if isinstance(value, dict):
            weights = {str(key).strip().lower(): float(weight) for key, weight in value.items()}
            if any(weight < 0 for weight in weights.values()):
                raise ValueError("category weights must be non-negative")
            return weights
        raise ValueError("category_weights must be a mapping")

    @field_validator("category_priority", mode="before")
    def _split_priority(cls, value):  # type: ignore[override]
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            return tuple(part.strip().lower() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple)):
            return tuple(str(item).strip().lower() for item in value if str(item).strip())
        return ()


def _normalise_level(level: str) -> str:
    return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)
