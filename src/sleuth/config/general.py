import sys
import warnings
from typing import Annotated, ClassVar, override

from pydantic import AfterValidator, BaseModel, Field, SecretStr
from pydantic_file_secrets import FileSecretsSettingsSource, SettingsConfigDict
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    YamlConfigSettingsSource,
)

from sleuth.types.general import LogLevel

# Filter warnings about secrets because they're optional
warnings.filterwarnings(
    action="ignore", message='directory "/run/secrets" does not exist'
)
warnings.filterwarnings(
    action="ignore", message='directory "config/secrets" does not exist'
)

python_version = (
    f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
)


def uppercase(value: str) -> str:
    """Make a string uppercase."""
    return value.upper()


def strip_trailing_slash(value: str) -> str:
    """Drop trailing slashes so path segments can be joined onto the URL."""
    return value.rstrip("/")


class HttpSettings(BaseModel):
    """Settings for the default HTTP transport."""

    timeout: Annotated[
        float,
        Field(description="Time in seconds before a request should time out."),
    ] = 30
    verify_certs: Annotated[
        bool, Field(description="Verify the server's TLS certificate.")
    ] = True
    follow_redirects: Annotated[
        bool, Field(description="Follow HTTP redirects returned by the server.")
    ] = False
    user_agent: Annotated[
        str, Field(description="User-Agent header sent with every request.")
    ] = f"Sleuth Python/{python_version}"


class AuthSettings(BaseModel):
    """HTTP basic auth credentials, if the server requires them."""

    username: str | None = None
    password: SecretStr | None = None


class ClientSettings(BaseSettings):
    """Search client config."""

    server: Annotated[
        str,
        AfterValidator(strip_trailing_slash),
        Field(description="Base URL of the search server."),
    ] = "http://localhost:9200"

    log_level: Annotated[
        LogLevel,
        AfterValidator(uppercase),
    ] = Field(
        default="INFO",
        description="Level of client logs to print.",
    )

    http: HttpSettings = HttpSettings()
    auth: AuthSettings = AuthSettings()

    # Weird override happening here, see https://github.com/makukha/pydantic-file-secrets for an explanation
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(  # pyright:ignore[reportIncompatibleVariableOverride] This is the intended pattern
        env_prefix="SLEUTH_",
        case_sensitive=False,
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="config/sleuth.yaml",
        yaml_file_encoding="utf-8",
        secrets_dir=["config/secrets", "/run/secrets"],
        secrets_nested_delimiter="__",
    )

    @classmethod
    @override
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Ensure proper setting priority order."""
        return (
            env_settings,
            FileSecretsSettingsSource(file_secret_settings),
            file_secret_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            init_settings,
        )


CONFIG = ClientSettings()
