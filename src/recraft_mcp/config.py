from pydantic import Field, HttpUrl, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from recraft_mcp.errors import ConfigurationError

DEFAULT_API_URL = "https://external.api.recraft.ai"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RECRAFT_",
        extra="ignore",
    )

    api_url: HttpUrl = Field(
        DEFAULT_API_URL, description="Base URL of the Recraft API."
    )
    api_key: str = Field(..., min_length=1, description="Recraft API key.")

    @property
    def base_url(self) -> str:
        return str(self.api_url).rstrip("/")


def load_settings(**overrides) -> Settings:
    """Read the environment once and fail fast on anything missing or malformed."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = []
        invalid_url = None
        for error in e.errors(include_url=False):
            field_name = error["loc"][0] if error["loc"] else ""
            if field_name == "api_key":
                missing.append("RECRAFT_API_KEY")
            elif field_name == "api_url":
                invalid_url = error.get("input")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            ) from e
        if invalid_url is not None:
            raise ConfigurationError(
                f"Invalid RECRAFT_API_URL: {invalid_url}. Must be a valid URL."
            ) from e
        raise ConfigurationError(str(e)) from e
