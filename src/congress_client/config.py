from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlparse

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_BASE_URL = "https://api.congress.gov/v3"
RESPONSE_FORMAT = "json"
DEFAULT_PAGE_LIMIT = 250

ParamValue = Union[str, int]


def _default_params() -> Mapping[str, ParamValue]:
    return {"format": RESPONSE_FORMAT, "limit": DEFAULT_PAGE_LIMIT}


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable settings for a CongressClient.

    Built once at startup. Every problem with the values is reported here as a
    ConfigError, so a client never exists with an unusable key or URL.
    """
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    default_params: Mapping[str, ParamValue] = field(default_factory=_default_params)
    timeout: float = 60.0          # per HTTP attempt, seconds
    max_attempts: int = 3          # total attempts, first one included
    backoff_base: float = 0.5      # seconds before the first retry
    backoff_cap: float = 60.0
    jitter: float = 0.2            # +/- fraction applied to computed delays
    max_concurrency: int = 64      # HTTP exchanges in flight at once, per client

    def __post_init__(self):
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigError(
                "Congress.gov API key not provided. Set CONGRESS_API_KEY env var or pass api_key=..."
            )
        object.__setattr__(self, "api_key", self.api_key.strip())

        u = urlparse(self.base_url or "")
        if u.scheme not in ("http", "https") or not u.netloc:
            raise ConfigError(f"base_url must be an absolute http(s) URL. Got {self.base_url!r}.")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

        params = dict(self.default_params or {})
        for k, v in params.items():
            if not isinstance(k, str) or isinstance(v, bool) or not isinstance(v, (str, int)):
                raise ConfigError(f"default_params must map str to str|int. Got {k!r}={v!r}.")
        # the response format marker is not negotiable
        params["format"] = RESPONSE_FORMAT
        params.pop("api_key", None)
        object.__setattr__(self, "default_params", MappingProxyType(params))

        if int(self.max_attempts) < 1:
            raise ConfigError(f"max_attempts must be >= 1. Got {self.max_attempts}.")
        if int(self.max_concurrency) < 1:
            raise ConfigError(f"max_concurrency must be >= 1. Got {self.max_concurrency}.")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive. Got {self.timeout}.")
        if self.backoff_base < 0:
            raise ConfigError(f"backoff_base must be >= 0. Got {self.backoff_base}.")
        if self.backoff_cap < self.backoff_base:
            raise ConfigError(
                f"backoff_cap ({self.backoff_cap}) must not be below backoff_base ({self.backoff_base})."
            )
        if not (0.0 <= self.jitter < 1.0):
            raise ConfigError(f"jitter must be in [0,1). Got {self.jitter}.")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides: Any) -> "ClientConfig":
        """
        Build a config from the environment, after loading a .env file.

        Variables already present in the environment win over the .env file.
        Keyword overrides win over both.
        """
        load_dotenv(dotenv_path=dotenv_path, override=False)

        values: dict = {
            "api_key": os.getenv("CONGRESS_API_KEY") or os.getenv("CONGRESS_DOT_GOV_API_KEY") or "",
        }
        base_url = os.getenv("CONGRESS_API_BASE_URL")
        if base_url:
            values["base_url"] = base_url
        try:
            timeout = os.getenv("CONGRESS_API_TIMEOUT")
            if timeout:
                values["timeout"] = float(timeout)
            max_attempts = os.getenv("CONGRESS_API_MAX_ATTEMPTS")
            if max_attempts:
                values["max_attempts"] = int(max_attempts)
            max_concurrency = os.getenv("CONGRESS_API_MAX_CONCURRENCY")
            if max_concurrency:
                values["max_concurrency"] = int(max_concurrency)
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting in environment: {e}") from e

        values.update(overrides)
        return cls(**values)
