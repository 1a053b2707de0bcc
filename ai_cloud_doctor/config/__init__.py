"""
Configuration for AI Cloud Doctor.

Effective settings resolution and the packaged analyzer definitions.
"""

from .loader import AppConfig, AwsCredentials, ConfigurationError, load_config, save_config

__all__ = ["AppConfig", "AwsCredentials", "ConfigurationError", "load_config", "save_config"]
