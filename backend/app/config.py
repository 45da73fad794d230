from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_version: str = "2026-10-18.v1"
    database_url: str = "sqlite:///./facility_finance.db"

    # ---- Logging ----
    log_level: str = "INFO"
    sql_log_level: str = "WARNING"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Auth ----
    auth_mode: str = "dev"  # dev|jwt
    dev_auto_provision: bool = True

    dev_header_org_slug: str = "X-Org-Slug"
    dev_header_user_email: str = "X-User-Email"
    dev_header_user_role: str = "X-User-Role"

    jwt_secret: str = "dev-change-me"
    jwt_exp_minutes: int = 60 * 24 * 7  # 7 days

    # ---- Rollup tuning ----
    over_budget_threshold: float = 1.10  # snapshot "over budget" = actual > budget * 1.10
    at_risk_budget_threshold: float = 0.90  # snapshot "at risk" = actual > budget * 0.90

    health_weight_budget: float = 0.4
    health_weight_schedule: float = 0.3
    health_weight_risk: float = 0.3

    # ---- Celery ----
    celery_broker_url: str | None = None
    celery_result_backend: str | None = None
    snapshot_schedule_enabled: bool = False

    def model_post_init(self, __context) -> None:
        weights = self.health_weight_budget + self.health_weight_schedule + self.health_weight_risk
        if abs(weights - 1.0) > 1e-9:
            raise ValueError(f"health weights must sum to 1.0 (got {weights})")

        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            if (self.auth_mode or "").strip().lower() == "dev":
                raise ValueError("SECURITY: auth_mode=dev is not allowed in prod")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
