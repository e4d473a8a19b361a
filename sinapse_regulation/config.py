import logging
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # GCP
    gcp_project_id: str = "sinapse-dev"
    env: str = "dev"

    # Firestore
    firestore_collection: str = "patient_regulation"

    # CORS
    cors_allowed_origins: str = "http://localhost:5173"

    # Rate limits (slowapi notation)
    care_team_rate_limit: str = "60/minute"
    nir_rate_limit: str = "120/minute"
    health_rate_limit: str = "200/minute"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    @property
    def pubsub_regulation_events_topic(self) -> str:
        return f"projects/{self.gcp_project_id}/topics/sinapse-{self.env}-regulation-events"

    model_config = {"env_prefix": "", "case_sensitive": False}

    @model_validator(mode="after")
    def _validate_required_in_production(self) -> "Settings":
        if self.env in ("staging", "prod"):
            if not self.gcp_project_id or self.gcp_project_id == "sinapse-dev":
                raise ValueError(
                    f"GCP_PROJECT_ID is required in {self.env} environment"
                )
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
