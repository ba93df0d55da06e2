from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .env_auth import EnvAuthConfig, create_env_auth_manager
from .errors import ConfigError

DEFAULT_TIMEOUT = 30.0


@dataclass
class BridgeConfig:
    url: str
    user: str
    token: str
    timeout: float = DEFAULT_TIMEOUT
    prefixes: list[str] = field(default_factory=list)
    search_title: bool = True
    search_commits: bool = False
    search_branch: bool = False
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = 'INFO'
    source_file: Path | None = None

    def __post_init__(self) -> None:
        missing = [name for name in ('url', 'user', 'token') if not getattr(self, name)]
        if missing:
            raise ConfigError(
                'Missing Jira connection parameter(s): ' + ', '.join(missing)
            )
        self.url = self.url.rstrip('/')

    def browse_link(self, key: str) -> str:
        return f'{self.url}/browse/{key}'


def _resolve_env_var(value: Any, env: Mapping[str, str]) -> Any:
    """Resolve environment variable if value starts with $; unset resolves to None."""
    if isinstance(value, str) and value.startswith('$'):
        return env.get(value[1:]) or None
    return value


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f'Configuration file not found: {path}')
    try:
        raw = yaml.safe_load(path.read_text(encoding='utf-8'))
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {path}: {exc}') from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f'Configuration root must be a mapping: {path}')
    return cast(dict[str, Any], raw)


def _as_prefixes(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [p.strip() for p in value.split(',') if p.strip()]
    return [str(p).strip() for p in value if str(p).strip()]


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {'1', 'true', 'yes', 'on'}
    return bool(value)


def load_config(
    path: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    env_auth: EnvAuthConfig | None = None,
) -> BridgeConfig:
    """Build a BridgeConfig from an optional YAML file plus the environment.

    Values in the file win; connection parameters missing from it are taken
    from ``JIRA_URL`` / ``JIRA_USER`` / ``JIRA_API_TOKEN`` (or their
    ``DANGER_JIRA_*`` aliases).
    """
    p = Path(path) if path is not None else None
    raw = _read_yaml(p) if p is not None else {}
    jira = cast(dict[str, Any], raw.get('jira', {}) or {})
    search = cast(dict[str, Any], raw.get('search', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})

    auth = create_env_auth_manager(env_auth, env=env)
    environ = auth.env

    url = _resolve_env_var(jira.get('url'), environ) or auth.get_jira_url()
    user = _resolve_env_var(jira.get('user'), environ) or auth.get_jira_user()
    token = _resolve_env_var(jira.get('token'), environ) or auth.get_jira_token()

    try:
        timeout = float(jira.get('timeout', DEFAULT_TIMEOUT))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"jira.timeout must be a number: {jira.get('timeout')!r}") from exc

    return BridgeConfig(
        url=str(url or ''),
        user=str(user or ''),
        token=str(token or ''),
        timeout=timeout,
        prefixes=_as_prefixes(search.get('prefixes', environ.get('REVIEWBRIDGE_PREFIXES'))),
        search_title=_as_bool(search.get('title', True)),
        search_commits=_as_bool(search.get('commits', False)),
        search_branch=_as_bool(search.get('branch', False)),
        logging_json_enabled=_as_bool(
            logging_config.get('json_enabled', environ.get('REVIEWBRIDGE_LOG_JSON', False))
        ),
        logging_level=str(
            logging_config.get('level', environ.get('REVIEWBRIDGE_LOG_LEVEL', 'INFO'))
        ),
        source_file=p,
    )


__all__ = ['BridgeConfig', 'ConfigError', 'load_config']
