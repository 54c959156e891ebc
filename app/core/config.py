from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="OrbitConnect Engagement")
    app_description: str = Field(
        default="Reactions, connections and knowledge points for OrbitConnect"
    )
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=True)
    production: bool = Field(default=False)
    timezone: str = Field(default="UTC")

    # Database Configuration
    # database_url takes precedence over the db_* parts when set
    database_url: Optional[str] = Field(default=None)
    db_host: str = Field(default="127.0.0.1")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="orbitconnect")
    db_username: str = Field(default="orbit")
    db_password: str = Field(default="orbit")
    db_echo: bool = Field(default=False)

    # Security Settings
    cors_allowed_origins: List[str] = Field(default=["http://localhost:3000"])

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_storage_uri: str = Field(default="memory://")
    rate_limit_default: str = Field(default="120/minute")
    rate_limit_write: str = Field(default="30/minute")

    # Logging
    log_level: str = Field(default="info")
    log_dir: str = Field(default="logs")

    # Pagination
    default_page_size: int = Field(default=20)
    max_page_size: int = Field(default=100)

    # Engagement rules
    knowledge_points_cap: int = Field(default=100)
    knowledge_points_step: int = Field(default=0)
    connection_strict_transitions: bool = Field(default=False)

    # Startup
    seed_demo_data: bool = Field(default=False)

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, ["http://localhost:3000"])

    @field_validator("knowledge_points_cap")
    def validate_points_cap(cls, v):
        if v <= 0:
            raise ValueError("knowledge_points_cap must be positive")
        return v

    @field_validator("knowledge_points_step")
    def validate_points_step(cls, v):
        if v < 0:
            raise ValueError("knowledge_points_step cannot be negative")
        return v

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return "postgresql+psycopg2://{user}:{password}@{host}:{port}/{database}".format(
            user=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        return settings
    except ValidationError as e:
        print("❌ Validation Error:", e)
        raise


settings = load_settings()
