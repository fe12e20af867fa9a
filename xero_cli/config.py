"""
xero-cli runtime settings.

Settings are built once from a mapping of environment variables (defaulting
to ``os.environ``) and passed explicitly to every component. Nothing else in
the package reads or writes process environment state.

Precedence for values that can also be given on the command line:
explicit CLI option > environment variable > interactive prompt.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, Final, Optional

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    EnvSettingsSource,
    NoDecode,
    SettingsConfigDict,
    SettingsError,
)

from .errors import ConfigurationError

ENV_PREFIX: Final[str] = "XERO_"

DEFAULT_HOME_DIR_NAME: Final[str] = ".xero-cli"
DEFAULT_IDENTITY_URL: Final[str] = "https://identity.xero.com"
DEFAULT_AUTHORIZE_URL: Final[str] = (
    "https://login.xero.com/identity/connect/authorize"
)
DEFAULT_API_URL: Final[str] = "https://api.xero.com"
DEFAULT_PROXY_HOST: Final[str] = "0.0.0.0"
DEFAULT_PROXY_PORT: Final[int] = 8765

_HOME_FILES: Final[dict[str, str]] = {
    "auth_file": "auth.json",
    "policy_file": "policy.json",
    "audit_log": "audit.jsonl",
}
_APPROVAL_DEFAULTS: Final[dict[str, bool]] = {
    "approve": True,
    "allow": True,
    "yes": True,
    "deny": False,
    "no": False,
}


class _MappingEnvSource(EnvSettingsSource):
    """Environment source over an explicit mapping; blank values are unset."""

    def __init__(
        self, settings_cls: type[BaseSettings], environ: Mapping[str, str]
    ):
        self._environ = environ
        super().__init__(settings_cls)

    def _load_env_vars(self) -> Mapping[str, Optional[str]]:
        loaded: dict[str, Optional[str]] = {}
        for name, raw in self._environ.items():
            value = raw.strip()
            if not value:
                continue
            loaded[name if self.case_sensitive else name.lower()] = value
        return loaded


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Only explicit values; the environment arrives via ``from_environ``."""
        return (init_settings,)

    cli_home: Path = Path.home() / DEFAULT_HOME_DIR_NAME
    auth_file: Path
    policy_file: Path
    audit_log: Path
    audit_full: bool = False
    tenant_id_default: Optional[str] = None
    keyring_password: Optional[str] = None
    proxy_url: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    scopes: Annotated[tuple[str, ...], NoDecode] = ()
    redirect_uri: Optional[str] = None
    sdk_module: Optional[str] = None
    approval_default: bool = True
    manifest_path: Optional[Path] = None
    identity_url: str = DEFAULT_IDENTITY_URL
    authorize_url: str = DEFAULT_AUTHORIZE_URL
    api_url: str = DEFAULT_API_URL

    @model_validator(mode="before")
    @classmethod
    def fill_file_locations(cls, data: Any) -> Any:
        """Files not given explicitly live under ``cli_home``."""
        if not isinstance(data, dict):
            return data
        home = Path(
            data.get("cli_home") or Path.home() / DEFAULT_HOME_DIR_NAME
        ).expanduser()
        filled = {**data, "cli_home": home}
        for field_name, file_name in _HOME_FILES.items():
            if not filled.get(field_name):
                filled[field_name] = home / file_name
        return filled

    @field_validator("auth_file", "policy_file", "audit_log", "manifest_path")
    @classmethod
    def expand_user(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    @field_validator("proxy_url", "identity_url", "authorize_url", "api_url")
    @classmethod
    def trim_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value

    @field_validator("scopes", mode="before")
    @classmethod
    def split_scopes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_scope_list(value)
        return value

    @field_validator("approval_default", mode="before")
    @classmethod
    def parse_approval_default(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        try:
            return _APPROVAL_DEFAULTS[value.strip().lower()]
        except KeyError:
            raise ValueError(
                f"must be one of: {', '.join(sorted(_APPROVAL_DEFAULTS))}"
            ) from None

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
    ) -> Settings:
        try:
            source = _MappingEnvSource(
                cls, os.environ if environ is None else environ
            )
            return cls(**source())
        except SettingsError as error:
            raise ConfigurationError(str(error)) from None
        except ValidationError as error:
            raise ConfigurationError(_describe_validation_error(error)) from None

    def with_overrides(self, **overrides: Any) -> Settings:
        """Apply explicit CLI options; ``None`` values are ignored."""
        applied = {
            key: value
            for key, value in overrides.items()
            if value is not None
        }
        return self.model_copy(update=applied)

    @property
    def has_env_credentials(self) -> bool:
        return self.client_id is not None or self.client_secret is not None

    @property
    def is_proxy_mode(self) -> bool:
        return self.proxy_url is not None


def parse_scope_list(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(
        scope
        for scope in raw.replace(",", " ").split()
        if scope.strip()
    )


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        field_name = str(detail["loc"][0]) if detail["loc"] else "settings"
        problems.append(
            f"{ENV_PREFIX}{field_name.upper()}: {detail['msg']}"
        )
    return "; ".join(problems)
