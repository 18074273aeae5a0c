"""
Application settings from environment variables (or a local .env file).

Only the AI provider settings are optional in practice: leaving them empty
disables the chat delegation path but keeps every data route working.
"""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    log_level: str = "INFO"

    # Data layout
    data_dir: Path = Path("data")
    flights_file: Path | None = None
    logs_dir: Path | None = None
    static_dir: Path = Path("public")
    prompts_file: Path | None = None

    # Azure OpenAI
    azure_openai_endpoint: str = ""
    azure_openai_key: str = ""
    azure_openai_deployment: str = ""
    azure_openai_api_version: str = "2023-05-15"

    # Neuro-SAN
    neuro_api_url: str = ""
    neuro_project_name: str = ""
    neuro_session_id: str = "default-session-id"

    upstream_timeout_seconds: float = 30.0

    @property
    def master_flights_path(self) -> Path:
        return self.flights_file or self.data_dir / "flights.json"

    @property
    def overrides_dir(self) -> Path:
        return self.data_dir / "flights"

    @property
    def tuner_path(self) -> Path:
        return self.data_dir / "tuner.json"

    @property
    def log_dir(self) -> Path:
        return self.logs_dir or self.data_dir / "logs"

    @property
    def azure_configured(self) -> bool:
        return bool(self.azure_openai_endpoint and self.azure_openai_key and self.azure_openai_deployment)

    @property
    def neuro_configured(self) -> bool:
        return bool(self.neuro_api_url and self.neuro_project_name)


settings = Settings()
