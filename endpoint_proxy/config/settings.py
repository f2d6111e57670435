"""Application settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Public address this service is reachable under; proxy URLs hang off it
    public_base_url: str = "http://localhost:3001"

    # Comma-separated browser origins for the global CORS policy
    cors_origins: str = "http://localhost:5173,http://localhost:3001"

    # Endpoint store
    endpoint_store_backend: str = "sql"  # "sql" | "json" | "dynamodb"
    database_url: str = "sqlite:///endpoints.db"
    endpoint_store_path: str = "endpoints.json"
    dynamodb_table_name: str = "llm-proxy-endpoints"
    aws_region: str = "us-east-1"

    # Fernet key for encrypting upstream API keys at rest (empty = plaintext)
    api_key_encryption_key: str = ""

    # Outbound calls
    upstream_timeout: float = 30.0  # seconds

    # Logging
    log_level: str = "INFO"
    audit_log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def proxy_url_for(self, proxy_id: str) -> str:
        """Build the public proxy URL for a proxy identifier."""
        return f"{self.public_base_url.rstrip('/')}/proxy/{proxy_id}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
