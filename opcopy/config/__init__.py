"""Configuration package for opcopy."""

from .models import ProfileConfig, UserConfigData
from .user_config import UserConfig, create_user_config


__all__ = [
    "ProfileConfig",
    "UserConfig",
    "UserConfigData",
    "create_user_config",
]
