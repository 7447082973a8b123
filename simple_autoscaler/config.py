import os
from dataclasses import dataclass
from typing import Mapping, Optional

from simple_autoscaler.domain.errors import ConfigurationError

VERSION = "1.0"

# autoscaler can not operate safely on apps with fewer instances than this
MIN_INSTANCES_LIMIT = 3

INTERVAL_SEC = 30
HTTP_TIMEOUT_SEC = 10.0
DEFAULT_PORT = 8080


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} should be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    api_url: str
    rules_json: Optional[str] = None
    rules_file: Optional[str] = None
    access_token: str = ""
    skip_ssl_validation: bool = False
    port: int = DEFAULT_PORT
    interval_sec: int = INTERVAL_SEC
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        api_url = env.get("CF_API_URL", "")
        if not api_url:
            raise ConfigurationError("CF_API_URL is not set")

        rules_json = env.get("AUTOSCALER_RULES") or None
        rules_file = env.get("AUTOSCALER_RULES_FILE") or None
        if rules_json is None and rules_file is None:
            raise ConfigurationError("neither AUTOSCALER_RULES nor AUTOSCALER_RULES_FILE is set")

        interval_sec = _int_env(env, "AUTOSCALER_INTERVAL_SEC", INTERVAL_SEC)
        if interval_sec <= 0:
            raise ConfigurationError("AUTOSCALER_INTERVAL_SEC should be positive")

        return cls(
            api_url=api_url,
            rules_json=rules_json,
            rules_file=rules_file,
            access_token=env.get("CF_ACCESS_TOKEN", ""),
            skip_ssl_validation=env.get("SKIP_SSL_VALIDATION") == "true",
            port=_int_env(env, "PORT", DEFAULT_PORT),
            interval_sec=interval_sec,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
