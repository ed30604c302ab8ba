"""InsightBites configuration — dataset endpoint, credentials and viewer settings."""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Delaware Open Data (Socrata SODA) restaurant inspection resource
    dataset_url: str = "https://data.delaware.gov/resource/384s-wygj.json"
    app_token: str = ""
    http_timeout: float = 20.0

    # "remote" filters server-side per request, "local" fetches the whole
    # dataset once and filters in memory
    filter_strategy: Literal["remote", "local"] = "remote"

    # None means "use the strategy's own profile"
    row_limit: int | None = None
    inspection_types: list[str] | None = None

    city_list_limit: int = 1000
    dataset_page_size: int = 50000

    @model_validator(mode="after")
    def _strip_app_token(self) -> "Settings":
        """Strip whitespace/newlines from the token (common paste error in .env files)."""
        if self.app_token and self.app_token != self.app_token.strip():
            self.app_token = self.app_token.strip()
        return self

    # MLflow
    mlflow_tracking_uri: str = "sqlite:///mlruns/mlflow.db"
    mlflow_experiment_name: str = "insightbites"

    # Logging
    log_json: bool = True
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
