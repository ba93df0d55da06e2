"""Environment-based credentials for the Jira connection.

Reads the tracker URL, user and API token from environment variables,
optionally after loading a ``.env`` file. The legacy ``DANGER_JIRA_*``
names used by Danger-based pipelines are accepted as fallbacks.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    url_var: str = "JIRA_URL"
    user_var: str = "JIRA_USER"
    token_var: str = "JIRA_API_TOKEN"
    alternatives: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: {
            "url": ("DANGER_JIRA_URL", "JIRA_BASE_URL"),
            "user": ("DANGER_JIRA_USER", "JIRA_EMAIL"),
            "token": ("DANGER_JIRA_API_TOKEN", "JIRA_TOKEN"),
        }
    )


class EnvironmentAuthManager:
    """Looks up Jira connection parameters in the environment."""

    def __init__(self, config: EnvAuthConfig, env: Mapping[str, str] | None = None):
        self.config = config
        self.logger = get_logger()
        self._env = env
        if config.load_dotenv:
            self._load_dotenv()

    @property
    def env(self) -> Mapping[str, str]:
        return os.environ if self._env is None else self._env

    def _load_dotenv(self) -> None:
        """Load the first .env file found; existing variables win."""
        candidates = [self.config.dotenv_path] if self.config.dotenv_path else [
            ".env",
            ".env.local",
        ]
        for location in candidates:
            env_path = Path(location)
            if env_path.exists():
                load_dotenv(str(env_path))
                self.logger.debug(f"Loaded environment variables from {env_path}")
                break

    def _lookup(self, primary: str, kind: str) -> str | None:
        value = self.env.get(primary)
        if value:
            return value
        for alt_var in self.config.alternatives.get(kind, ()):
            value = self.env.get(alt_var)
            if value:
                self.logger.debug(f"Found Jira {kind} in {alt_var}")
                return value
        return None

    def get_jira_url(self) -> str | None:
        return self._lookup(self.config.url_var, "url")

    def get_jira_user(self) -> str | None:
        return self._lookup(self.config.user_var, "user")

    def get_jira_token(self) -> str | None:
        return self._lookup(self.config.token_var, "token")

    def is_ci_environment(self) -> bool:
        return any(self.env.get(k) for k in ("CI", "GITHUB_ACTIONS", "GITLAB_CI"))

    def get_authentication_recommendations(self) -> list[str]:
        recommendations: list[str] = []
        missing = [
            var
            for var, value in (
                (self.config.url_var, self.get_jira_url()),
                (self.config.user_var, self.get_jira_user()),
                (self.config.token_var, self.get_jira_token()),
            )
            if not value
        ]
        if not missing:
            return recommendations
        if self.is_ci_environment():
            recommendations.append(
                "Define " + ", ".join(missing) + " as masked CI/CD variables or repository secrets"
            )
        else:
            recommendations.append("Export " + ", ".join(missing) + " in your shell")
            recommendations.append("Or create a .env file defining " + ", ".join(missing))
        return recommendations


def create_env_auth_manager(
    config: EnvAuthConfig | None = None, env: Mapping[str, str] | None = None
) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config, env=env)


__all__ = ["EnvAuthConfig", "EnvironmentAuthManager", "create_env_auth_manager"]
