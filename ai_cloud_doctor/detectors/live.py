"""
Live-mode detection.

Decides whether analyzers may call AWS for this invocation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ai_cloud_doctor.config.loader import AppConfig, ConfigurationError


class Mode(str, Enum):
    """Requested analysis mode."""
    AUTO = "auto"
    LIVE = "live"
    OFFLINE = "offline"


@dataclass(frozen=True)
class LiveStatus:
    """Outcome of live-mode detection."""
    live: bool


def ensure_aws_live(config: AppConfig, mode: Union[Mode, str, None] = Mode.AUTO) -> LiveStatus:
    """Decide between live and offline operation.

    - offline: never live
    - live: live, but credentials are mandatory
    - auto: live exactly when a credential unit is present

    Raises:
        ConfigurationError: If live mode is forced without credentials, or
            the mode is not recognised
    """
    try:
        requested = Mode(mode or Mode.AUTO)
    except ValueError:
        raise ConfigurationError(f"Unknown mode '{mode}'; expected auto, live or offline")

    if requested == Mode.OFFLINE:
        return LiveStatus(live=False)
    if requested == Mode.LIVE:
        if config.aws_credentials is None:
            raise ConfigurationError("AWS credentials not found but --mode=live requested.")
        return LiveStatus(live=True)
    return LiveStatus(live=config.aws_credentials is not None)
