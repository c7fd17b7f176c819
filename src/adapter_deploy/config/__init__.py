"""Configuration management for adapter deploys."""

from .deploy_config import ENV_VARS, DeployConfig, load_config

__all__ = ["DeployConfig", "ENV_VARS", "load_config"]
