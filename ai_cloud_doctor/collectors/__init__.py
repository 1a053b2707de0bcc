"""
Data collectors for AI Cloud Doctor.

Each collector shells out to the AWS CLI (or reads a local file), projects
the output down to what the prompt needs and serializes it as JSON.
"""

from .base import Collector, CollectorError, UNKNOWN, run_aws
from .cost import CostCollector
from .iam import IamCollector
from .lambda_functions import LambdaCollector
from .logs import LogsCollector
from .security_hub import SecurityHubCollector
from .terraform import TerraformPlanCollector
from .trusted_advisor import TrustedAdvisorCollector

__all__ = [
    "Collector",
    "CollectorError",
    "UNKNOWN",
    "run_aws",
    "CostCollector",
    "IamCollector",
    "LambdaCollector",
    "LogsCollector",
    "SecurityHubCollector",
    "TerraformPlanCollector",
    "TrustedAdvisorCollector",
]
