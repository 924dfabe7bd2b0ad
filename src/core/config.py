"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el transporte y la sesión lean la config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import Credentials


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "fogbugz-cli"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "fogbugz-cli"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "fogbugz-cli"
    return Path.home() / ".config" / "fogbugz-cli"


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


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Los valores `None` se ignoran. El password nunca pasa por aquí: la CLI
    solo guarda dominio y email.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# fogbugz-cli user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Orden de carga: variables `FOGBUGZ_*`, luego `.env` del proyecto, luego el
    `.env` global del usuario.
    """

    model_config = SettingsConfigDict(
        env_prefix="FOGBUGZ_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    domain: str = Field(
        default="",
        description="Hostname del servicio, p.ej. 'example.fogbugz.com'.",
    )
    email: str = Field(
        default="",
        description="Email para el logon.",
    )
    password: str = Field(
        default="",
        repr=False,
        description="Password para el logon (no se persiste).",
    )
    token: str | None = Field(
        default=None,
        repr=False,
        description="Token ya emitido; si existe, la sesión arranca válida.",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="fogbugz-cli/0.1",
        min_length=1,
        description="User-Agent de las peticiones a la API.",
    )

    default_columns: str = Field(
        default="sTitle,sStatus,sPriority",
        min_length=1,
        description="Columnas por defecto para `search`.",
    )
    default_max_results: int = Field(
        default=50,
        ge=1,
        le=10_000,
        description="Máximo de casos por defecto para `search`.",
    )

    @field_validator("domain")
    @classmethod
    def _normalize_domain(cls, value: str) -> str:
        # Se aceptan URLs pegadas tal cual; solo nos interesa el hostname.
        domain = value.strip()
        for prefix in ("https://", "http://"):
            if domain.lower().startswith(prefix):
                domain = domain[len(prefix) :]
        return domain.split("/", 1)[0]

    def credentials(self) -> Credentials:
        return Credentials(domain=self.domain, email=self.email, password=self.password)

    def api_url(self) -> str:
        return f"https://{self.domain}/api.asp"
