"""
Feature Flags System
Environment-based feature control for the JumpStudy backend
"""

import os
from typing import Dict, List
from dataclasses import dataclass
from enum import Enum


class Environment(Enum):
    DEVELOPMENT = "development"
    TEST = "test"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class FeatureFlag:
    name: str
    enabled: bool
    description: str
    environments: List[Environment]


class FeatureFlagService:
    """Service for managing feature flags in the backend"""

    def __init__(self):
        self.current_environment = self._get_current_environment()
        self.flags = self._initialize_flags()

    def _get_current_environment(self) -> Environment:
        env_name = os.getenv('ENVIRONMENT', 'development').lower()
        try:
            return Environment(env_name)
        except ValueError:
            return Environment.DEVELOPMENT

    def _initialize_flags(self) -> Dict[str, FeatureFlag]:
        flags = {
            'cache_enabled': FeatureFlag(
                name='cache_enabled',
                enabled=False,
                description='Cache the public course catalog in process',
                environments=[Environment.STAGING, Environment.PRODUCTION]
            ),
            'avatar_generation': FeatureFlag(
                name='avatar_generation',
                enabled=True,
                description='Generate advocate avatars from a seed',
                environments=[
                    Environment.DEVELOPMENT, Environment.TEST,
                    Environment.STAGING, Environment.PRODUCTION,
                ]
            ),
            'env_admin_emails': FeatureFlag(
                name='env_admin_emails',
                enabled=True,
                description='Promote ADMIN_EMAILS addresses at sign-in',
                environments=[
                    Environment.DEVELOPMENT, Environment.TEST,
                    Environment.STAGING, Environment.PRODUCTION,
                ]
            ),
        }

        self._apply_environment_overrides(flags)

        return flags

    def _apply_environment_overrides(self, flags: Dict[str, FeatureFlag]) -> None:
        for flag in flags.values():
            flag.enabled = self.current_environment in flag.environments

            env_var_name = f"FEATURE_{flag.name.upper()}"
            env_override = os.getenv(env_var_name)
            if env_override is not None:
                flag.enabled = env_override.lower() in ('true', '1', 'yes', 'on')

    def is_enabled(self, flag_name: str) -> bool:
        flag = self.flags.get(flag_name)
        if flag is None:
            return False
        return flag.enabled

    def get_enabled_flags(self) -> List[str]:
        return [name for name, flag in self.flags.items() if flag.enabled]

    def set_flag(self, flag_name: str, enabled: bool) -> bool:
        """Toggle a flag at runtime (outside production only)."""
        if self.current_environment == Environment.PRODUCTION:
            return False

        flag = self.flags.get(flag_name)
        if flag:
            flag.enabled = enabled
            return True
        return False

    def get_environment_info(self) -> Dict:
        return {
            'current_environment': self.current_environment.value,
            'total_flags': len(self.flags),
            'enabled_flags': len(self.get_enabled_flags()),
            'flag_summary': {name: flag.enabled for name, flag in self.flags.items()}
        }


# Global feature flag service instance
feature_flags = FeatureFlagService()


def is_feature_enabled(flag_name: str) -> bool:
    return feature_flags.is_enabled(flag_name)


def require_feature(flag_name: str):
    """FastAPI dependency factory that 404s when a feature is off."""
    async def dependency() -> bool:
        if not is_feature_enabled(flag_name):
            from fastapi import HTTPException
            raise HTTPException(
                status_code=404,
                detail=f"Feature '{flag_name}' is not available"
            )
        return True
    return dependency
