from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from gaap_mcp.errors import MissingConfigurationError

ENV_PREFIX = "GAAP_"
DEFAULT_MCP_URL = "https://automation.omnidm.ai/webhook/gaap-mcp/invoke"


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    tenant_id: str = Field(min_length=1)
    api_key: str = Field(min_length=1, repr=False)
    webhook_secret: str = Field(min_length=1, repr=False)


class Settings(BaseSettings):
    tenant_id: str = Field(min_length=1)
    api_key: str = Field(min_length=1, repr=False)
    webhook_secret: str = Field(min_length=1, repr=False)

    mcp_url: str = DEFAULT_MCP_URL
    timeout_seconds: float = 30.0
    log_level: str = "INFO"

    server_name: str = "gaap-mcp"
    server_version: str = "1.0.0"

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def credentials(self) -> Credentials:
        return Credentials(
            tenant_id=self.tenant_id,
            api_key=self.api_key,
            webhook_secret=self.webhook_secret,
        )


def load_settings(**overrides: object) -> Settings:
    # Empty values count as absent.
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        missing: list[str] = []
        for error in exc.errors():
            if error["type"] not in {"missing", "string_too_short"}:
                continue
            field = str(error["loc"][0])
            name = f"{ENV_PREFIX}{field.upper()}"
            if name not in missing:
                missing.append(name)
        if not missing:
            raise
        raise MissingConfigurationError(missing) from exc
