"""
Environment detectors for AI Cloud Doctor.
"""

from .live import LiveStatus, Mode, ensure_aws_live

__all__ = ["LiveStatus", "Mode", "ensure_aws_live"]
