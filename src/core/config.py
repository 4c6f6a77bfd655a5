"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Las credenciales de Salesforce se leen una sola vez y nunca se mutan.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "sf-site-users"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "sf-site-users"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "sf-site-users"
    return Path.home() / ".config" / "sf-site-users"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Los valores `None` se ignoran, así un prompt vacío no borra lo existente.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# sf-site-users user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI, adaptadores y el build.
    """

    model_config = SettingsConfigDict(
        env_prefix="SF_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    login_url: str = Field(
        default="https://login.salesforce.com",
        min_length=8,
        description="Endpoint de login (SF_LOGIN_URL).",
    )
    username: str = Field(
        default="",
        description="Usuario de Salesforce (SF_USERNAME).",
    )
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Password del usuario (SF_PASSWORD).",
    )
    token: SecretStr = Field(
        default=SecretStr(""),
        description="Security token que se concatena al password (SF_TOKEN).",
    )
    api_version: str = Field(
        default="50.0",
        pattern=r"^\d+\.\d+$",
        description="Versión de la API (SOAP login y REST query).",
    )

    http_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout por request (segundos). Sin valor no hay timeout local.",
    )
    user_agent: str = Field(
        default="sf-site-users/0.1",
        min_length=1,
        description="User-Agent para las llamadas a Salesforce.",
    )
    strict_auth: bool = Field(
        default=True,
        description="Si el login falla, el build falla con AuthenticationError.",
    )
    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING...).",
    )

    site_input_dir: Path = Field(
        default=Path("site"),
        description="Directorio de templates del sitio.",
    )
    site_output_dir: Path = Field(
        default=Path("dist"),
        description="Directorio de salida del build.",
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password.get_secret_value())

    def login_secret(self) -> str:
        """Password + security token, tal cual lo espera el login SOAP."""

        return self.password.get_secret_value() + self.token.get_secret_value()
