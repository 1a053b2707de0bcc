"""
Shared collector plumbing.

Runs the AWS CLI as a subprocess and turns failures into readable
strings at the collector boundary.
"""

import dataclasses
import json
import logging
import subprocess
from typing import Any, Dict, List, Optional, Sequence

from ai_cloud_doctor.config.loader import AppConfig

logger = logging.getLogger(__name__)

AWS_PROFILE = "ai-cloud-doctor"

PRIMARY_TIMEOUT = 30  # seconds
SECONDARY_TIMEOUT = 15  # seconds

# Marker for fields the upstream payload did not provide
UNKNOWN = "UNKNOWN"


class CollectorError(Exception):
    """Raised when an AWS CLI call fails or returns unusable output."""


def build_aws_command(args: Sequence[str], config: Optional[AppConfig] = None) -> List[str]:
    command = ["aws", *args, "--profile", AWS_PROFILE, "--output", "json"]
    if config is not None and config.region:
        command.extend(["--region", config.region])
    return command


def run_aws(args: Sequence[str], config: Optional[AppConfig] = None, timeout: int = PRIMARY_TIMEOUT) -> Dict[str, Any]:
    """Run one AWS CLI command and return its parsed JSON output.

    Args:
        args: CLI arguments after ``aws``, e.g. ``["iam", "list-users"]``
        config: Effective configuration, used for the region
        timeout: Seconds before the call is abandoned

    Returns:
        Parsed JSON object (empty dict for empty output)

    Raises:
        CollectorError: On a missing binary, timeout, non-zero exit or
            output that is not JSON
    """
    command = build_aws_command(args, config)
    logger.debug("Running %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False
        )
    except FileNotFoundError:
        raise CollectorError("AWS CLI not found; install it and configure the "
                             f"'{AWS_PROFILE}' profile")
    except subprocess.TimeoutExpired:
        raise CollectorError(f"Command timed out after {timeout}s: aws {' '.join(args)}")

    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise CollectorError(f"Command failed ({result.returncode}): aws {' '.join(args)}: {detail}")

    if not result.stdout.strip():
        return {}
    try:
        data = json.loads(result.stdout)
    except ValueError as e:
        raise CollectorError(f"Invalid JSON from aws {' '.join(args)}: {e}")
    if not isinstance(data, dict):
        raise CollectorError(f"Unexpected output from aws {' '.join(args)}")
    return data


def run_aws_optional(args: Sequence[str], config: Optional[AppConfig] = None,
                     timeout: int = SECONDARY_TIMEOUT) -> Dict[str, Any]:
    """Like run_aws, but a failure yields an empty object."""
    try:
        return run_aws(args, config, timeout)
    except CollectorError as e:
        logger.debug("Optional call skipped: %s", e)
        return {}


def text_or_unknown(value: Any) -> str:
    if value is None or value == "":
        return UNKNOWN
    return str(value)


def as_dict(value: Any) -> Dict[str, Any]:
    """``value`` if it is a JSON object, else an empty one."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> List[Any]:
    """``value`` if it is a JSON array, else an empty one."""
    return value if isinstance(value, list) else []


def as_dicts(value: Any) -> List[Dict[str, Any]]:
    """The objects of a JSON array; anything else in it is skipped."""
    return [item for item in as_list(value) if isinstance(item, dict)]


def to_json(projection: Any) -> str:
    """Serialize a projection dataclass (or plain data) as indented JSON."""
    if dataclasses.is_dataclass(projection):
        projection = dataclasses.asdict(projection)
    return json.dumps(projection, indent=2, default=str)


class Collector:
    """Base class for data collectors.

    Subclasses implement ``gather`` returning a projection dataclass and
    may raise CollectorError; ``collect`` never raises.
    """

    surface = "AWS"

    def __init__(self, config: AppConfig):
        self.config = config

    def gather(self) -> Any:
        raise NotImplementedError

    def collect(self) -> str:
        """Collected data as JSON, or an error message in its place."""
        try:
            return to_json(self.gather())
        except (CollectorError, ValueError, KeyError, TypeError, AttributeError, IndexError) as e:
            logger.debug("%s collection failed: %s", self.surface, e)
            return f"Error fetching {self.surface} data: {e}"
