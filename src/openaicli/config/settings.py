"""Resolved runtime settings for the conversation engine.

Values are layered, later sources winning:

1. built-in defaults (see :func:`default_contract`)
2. ``config.properties``
3. ``secret.properties``
4. environment variables
5. explicit overrides (CLI flags)

The result is an immutable :class:`Settings` instance that is handed to the
engine; nothing here is stored in module-level state.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from openaicli.errors import ConfigurationError

from .properties import load_properties


VarKind = Literal["string", "bool", "int", "float", "path"]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class VarSpec:
    key: str
    env: str
    field: str
    kind: VarKind
    description: str
    default: str | None = None
    required: bool = False
    secret: bool = False


def default_contract() -> tuple[VarSpec, ...]:
    """Every configuration key understood by openaicli."""

    return (
        VarSpec(
            key="openai.api.key",
            env="OPENAI_API_KEY",
            field="api_key",
            kind="string",
            description="Authentication credential for the completion service.",
            required=True,
            secret=True,
        ),
        VarSpec(
            key="openai.model",
            env="OPENAI_MODEL",
            field="model",
            kind="string",
            description="Model identifier sent with every completion request.",
            default="chatgpt-3.5",
        ),
        VarSpec(
            key="openai.baseUrl",
            env="OPENAI_BASE_URL",
            field="base_url",
            kind="string",
            description="Base URL of the OpenAI-compatible endpoint.",
            default="https://api.openai.com",
        ),
        VarSpec(
            key="openai.timeoutSeconds",
            env="OPENAI_TIMEOUT_SECONDS",
            field="timeout_seconds",
            kind="float",
            description="HTTP timeout for one completion request.",
            default="60",
        ),
        VarSpec(
            key="openai.maxTokens",
            env="OPENAI_MAX_TOKENS",
            field="max_tokens",
            kind="int",
            description="Token budget for each response.",
            default="256",
        ),
        VarSpec(
            key="openaicli.filename.history",
            env="OPENAICLI_HISTORY_FILE",
            field="history_file",
            kind="path",
            description="Path of the persisted transcript.",
            default="history",
        ),
        VarSpec(
            key="openaicli.filename.dateFormat",
            env="OPENAICLI_DATE_FORMAT",
            field="date_format",
            kind="string",
            description="Date pattern used for archive and code file names.",
            default="yyyy-MM-ddHH:mm:ss",
        ),
        VarSpec(
            key="openaicli.output.directory",
            env="OPENAICLI_OUTPUT_DIR",
            field="output_dir",
            kind="path",
            description="Directory receiving extracted code files.",
            default=".",
        ),
        VarSpec(
            key="openaicli.commandline.header",
            env="OPENAICLI_HEADER",
            field="header",
            kind="string",
            description="Prefix for console log lines.",
            default="Open AI CLI --->",
        ),
        VarSpec(
            key="openaicli.options.disableOutputCodeToFile",
            env="OPENAICLI_DISABLE_OUTPUT_CODE_TO_FILE",
            field="disable_output_code_to_file",
            kind="bool",
            description="Do not write code blocks from responses to files.",
            default="false",
        ),
        VarSpec(
            key="openaicli.options.disableLoggingChatGPTHistory",
            env="OPENAICLI_DISABLE_LOGGING_CHATGPT_HISTORY",
            field="disable_logging_chatgpt_history",
            kind="bool",
            description="Do not record turns in the transcript.",
            default="false",
        ),
        VarSpec(
            key="openaicli.options.disableSendingChatGPTHistory",
            env="OPENAICLI_DISABLE_SENDING_CHATGPT_HISTORY",
            field="disable_sending_chatgpt_history",
            kind="bool",
            description="Send only the current message instead of the transcript.",
            default="false",
        ),
    )


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str = "chatgpt-3.5"
    base_url: str = "https://api.openai.com"
    timeout_seconds: float = 60.0
    max_tokens: int = 256
    history_file: Path = field(default_factory=lambda: Path("history"))
    date_format: str = "yyyy-MM-ddHH:mm:ss"
    output_dir: Path = field(default_factory=lambda: Path("."))
    header: str = "Open AI CLI --->"
    disable_output_code_to_file: bool = False
    disable_logging_chatgpt_history: bool = False
    disable_sending_chatgpt_history: bool = False

    def redacted(self) -> dict[str, Any]:
        """Return the settings as a dict with secrets masked."""

        payload: dict[str, Any] = {}
        for spec in default_contract():
            value = getattr(self, spec.field)
            if spec.secret:
                value = _mask(str(value))
            elif isinstance(value, Path):
                value = str(value)
            payload[spec.key] = value
        return payload


def _mask(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:3]}...{value[-4:]}"


def _coerce(spec: VarSpec, raw: str) -> Any:
    value = raw.strip()
    if spec.kind == "bool":
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigurationError(f"{spec.key} must be a boolean, got {raw!r}")
    if spec.kind == "int":
        try:
            number = int(value)
        except ValueError:
            raise ConfigurationError(f"{spec.key} must be an integer, got {raw!r}") from None
        if number <= 0:
            raise ConfigurationError(f"{spec.key} must be positive, got {number}")
        return number
    if spec.kind == "float":
        try:
            number = float(value)
        except ValueError:
            raise ConfigurationError(f"{spec.key} must be a number, got {raw!r}") from None
        if number <= 0:
            raise ConfigurationError(f"{spec.key} must be positive, got {number}")
        return number
    if spec.kind == "path":
        return Path(value).expanduser()
    return value


def default_config_dir() -> Path:
    raw = (os.environ.get("OPENAICLI_CONFIG_DIR") or "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".openaicli"


def resolve_settings(
    *,
    properties: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
    require_credentials: bool = True,
) -> Settings:
    """Merge the configuration layers into a :class:`Settings` instance.

    ``properties`` uses the dotted keys, ``environ`` the env var names and
    ``overrides`` the :class:`Settings` field names. Blank values are
    treated as unset. Numeric overrides go through the same checks as
    file values. With ``require_credentials=False`` a missing required
    value resolves to an empty string, for commands that never talk to
    the completion service.

    Raises
    ------
    ConfigurationError
        If a value cannot be coerced or a required value is missing.
    """

    properties = properties or {}
    environ = os.environ if environ is None else environ
    overrides = {key: value for key, value in (overrides or {}).items() if value is not None}

    values: dict[str, Any] = {}
    for spec in default_contract():
        raw = spec.default
        for candidate in (properties.get(spec.key), environ.get(spec.env)):
            if candidate is not None and candidate.strip():
                raw = candidate

        if spec.field in overrides:
            value = overrides[spec.field]
            if isinstance(value, str) or spec.kind in ("int", "float"):
                value = _coerce(spec, str(value))
            values[spec.field] = value
        elif raw is not None:
            values[spec.field] = _coerce(spec, raw)
        elif spec.required and require_credentials:
            raise ConfigurationError(
                f"{spec.key} must be set in secret.properties or via ${spec.env}"
            )
        elif spec.required:
            values[spec.field] = ""

    return Settings(**values)


def load_settings(
    *,
    config_file: str | Path | None = None,
    secrets_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
    require_credentials: bool = True,
) -> Settings:
    """Read the properties files and resolve them with the environment.

    Explicitly passed files must exist; the default files in
    :func:`default_config_dir` are optional.
    """

    config_dir = default_config_dir()
    merged: dict[str, str] = {}
    merged.update(
        load_properties(config_file or config_dir / "config.properties", required=config_file is not None)
    )
    merged.update(
        load_properties(secrets_file or config_dir / "secret.properties", required=secrets_file is not None)
    )
    return resolve_settings(
        properties=merged,
        environ=environ,
        overrides=overrides,
        require_credentials=require_credentials,
    )
