"""
Configuration management and loading.

Merges CLI options, environment variables and the persisted user file into
a single effective configuration.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".ai-cloud-doctor-configs.json"

SCAN_PERIODS = (1, 7, 30, 120, 365)
DEFAULT_SCAN_PERIOD = 30

# Environment variable names, by config field
ENV_OPENAI_KEY = "OPENAI_API_KEY"
ENV_REGION = ("AWS_REGION", "AWS_DEFAULT_REGION")
ENV_ACCESS_KEY = "AWS_ACCESS_KEY_ID"
ENV_SECRET_KEY = "AWS_SECRET_ACCESS_KEY"
ENV_SESSION_TOKEN = "AWS_SESSION_TOKEN"
ENV_TUNABLES = {
    "model": "AI_CLOUD_DOCTOR_MODEL",
    "max_tokens": "AI_CLOUD_DOCTOR_MAX_TOKENS",
    "temperature": "AI_CLOUD_DOCTOR_TEMPERATURE",
    "verbosity": "AI_CLOUD_DOCTOR_VERBOSITY",
    "reasoning_effort": "AI_CLOUD_DOCTOR_REASONING_EFFORT",
    "service_tier": "AI_CLOUD_DOCTOR_SERVICE_TIER",
    "scan_period": "AI_CLOUD_DOCTOR_SCAN_PERIOD",
    "input_cost_per_million": "AI_CLOUD_DOCTOR_INPUT_COST",
    "output_cost_per_million": "AI_CLOUD_DOCTOR_OUTPUT_COST",
    "cached_cost_per_million": "AI_CLOUD_DOCTOR_CACHED_COST",
}


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or contradictory."""


@dataclass(frozen=True)
class AwsCredentials:
    """AWS credential unit. Either complete or not present at all."""
    access_key_id: str
    secret_access_key: str
    session_token: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {
            "access_key_id": self.access_key_id,
            "secret_access_key": self.secret_access_key,
        }
        if self.session_token:
            data["session_token"] = self.session_token
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Optional["AwsCredentials"]:
        """Build credentials from a stored object, or None if it is partial."""
        if not isinstance(data, dict):
            return None
        access_key = data.get("access_key_id")
        secret_key = data.get("secret_access_key")
        if not access_key or not secret_key:
            return None
        return cls(
            access_key_id=str(access_key),
            secret_access_key=str(secret_key),
            session_token=data.get("session_token") or None,
        )


@dataclass(frozen=True)
class AppConfig:
    """Effective configuration for one invocation."""
    openai_key: Optional[str] = None
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    verbosity: Optional[str] = None
    reasoning_effort: Optional[str] = None
    service_tier: Optional[str] = None
    input_cost_per_million: Optional[float] = None
    output_cost_per_million: Optional[float] = None
    cached_cost_per_million: Optional[float] = None
    scan_period: int = DEFAULT_SCAN_PERIOD
    region: Optional[str] = None
    aws_credentials: Optional[AwsCredentials] = None
    offline: bool = True


def default_config_path() -> Path:
    """Location of the persisted configuration file in the user's home."""
    return Path.home() / CONFIG_FILENAME


def read_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Read the persisted configuration.

    A missing, unreadable or malformed file is treated as an empty
    configuration rather than an error.
    """
    config_path = Path(path) if path else default_config_path()
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.debug("No usable config at %s: %s", config_path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def write_private_json(path: Path, data: Any) -> None:
    """Write JSON to ``path`` readable and writable by the owner only."""
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    os.chmod(path, 0o600)


def save_config(data: Dict[str, Any], path: Optional[Path] = None) -> Path:
    """Persist a full configuration object, replacing the existing file.

    Keys with a ``None`` value are not written.
    """
    config_path = Path(path) if path else default_config_path()
    cleaned = {key: value for key, value in data.items() if value is not None}
    write_private_json(config_path, cleaned)
    return config_path


def _parse_int(value: Any) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_float(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_scan_period(value: Any) -> Optional[int]:
    period = _parse_int(value)
    if period not in SCAN_PERIODS:
        return None
    return period


def _first(parse: Callable[[Any], Any], *candidates: Any) -> Any:
    """Return the first candidate that parses to a usable value."""
    for candidate in candidates:
        parsed = parse(candidate)
        if parsed is not None:
            return parsed
    return None


def _resolve_credentials(env: Mapping[str, str], file_cfg: Dict[str, Any]) -> Optional[AwsCredentials]:
    access_key = env.get(ENV_ACCESS_KEY)
    secret_key = env.get(ENV_SECRET_KEY)
    if access_key and secret_key:
        return AwsCredentials(
            access_key_id=access_key,
            secret_access_key=secret_key,
            session_token=env.get(ENV_SESSION_TOKEN) or None,
        )
    return AwsCredentials.from_dict(file_cfg.get("aws_credentials"))


def load_config(
    cli: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
    path: Optional[Path] = None,
) -> AppConfig:
    """Resolve the effective configuration.

    Precedence for every field is CLI option, then environment variable,
    then the persisted file, then the built-in default. AWS credentials
    resolve as a unit from the environment or the file.

    If the API key or AWS credentials were supplied through the CLI or
    environment and the file does not hold them yet, they are written back
    so later runs don't need them again. Other stored fields are kept.

    Args:
        cli: Options from the command line (``None`` values are ignored)
        env: Environment variable mapping; no variables are read otherwise
        path: Config file location, defaults to the user's home

    Returns:
        Frozen AppConfig
    """
    cli = cli or {}
    env = env or {}
    config_path = Path(path) if path else default_config_path()
    file_cfg = read_config_file(config_path)

    def tunable(name: str, parse: Callable[[Any], Any]) -> Any:
        return _first(parse, cli.get(name), env.get(ENV_TUNABLES[name]), file_cfg.get(name))

    openai_key = _first(_parse_str, cli.get("openai_key"), env.get(ENV_OPENAI_KEY), file_cfg.get("openai_key"))
    region = _first(
        _parse_str,
        cli.get("region"),
        *(env.get(name) for name in ENV_REGION),
        file_cfg.get("region"),
    )
    scan_period = tunable("scan_period", _parse_scan_period) or DEFAULT_SCAN_PERIOD
    credentials = _resolve_credentials(env, file_cfg)

    mode = str(cli.get("mode") or "auto")
    if mode == "offline":
        offline = True
    elif mode == "live":
        offline = False
    else:
        offline = credentials is None

    config = AppConfig(
        openai_key=openai_key,
        model=tunable("model", _parse_str),
        max_tokens=tunable("max_tokens", _parse_int),
        temperature=tunable("temperature", _parse_float),
        verbosity=tunable("verbosity", _parse_str),
        reasoning_effort=tunable("reasoning_effort", _parse_str),
        service_tier=tunable("service_tier", _parse_str),
        input_cost_per_million=tunable("input_cost_per_million", _parse_float),
        output_cost_per_million=tunable("output_cost_per_million", _parse_float),
        cached_cost_per_million=tunable("cached_cost_per_million", _parse_float),
        scan_period=scan_period,
        region=region,
        aws_credentials=credentials,
        offline=offline,
    )

    _persist_new_secrets(config, file_cfg, config_path)
    return config


def _persist_new_secrets(config: AppConfig, file_cfg: Dict[str, Any], config_path: Path) -> None:
    to_persist = dict(file_cfg)
    needs_write = False
    if config.openai_key and not file_cfg.get("openai_key"):
        to_persist["openai_key"] = config.openai_key
        needs_write = True
    if config.aws_credentials and AwsCredentials.from_dict(file_cfg.get("aws_credentials")) is None:
        to_persist["aws_credentials"] = config.aws_credentials.to_dict()
        needs_write = True
    if not needs_write:
        return
    try:
        write_private_json(config_path, to_persist)
        logger.debug("Stored new credentials in %s", config_path)
    except OSError as e:
        logger.debug("Could not write config %s: %s", config_path, e)
