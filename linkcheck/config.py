import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from . import __version__
from .utils import parse_duration, parse_positive_int

DEFAULT_CONFIG = {
    "workers": "5",
    "timeout": "10s",
    "queue_size": "100",
    "links_file": "links.csv",
    "log_level": "INFO",
    "log_format": "text",
    "user_agent": f"linkcheck/{__version__}",
}

ALLOWED_CONFIG_KEYS = set(DEFAULT_CONFIG.keys())

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS = ("text", "json")

ENV_PREFIX = "LINKCHECK_"


@dataclass(frozen=True)
class FetcherConfig:
    timeout: float = 10.0
    user_agent: str = DEFAULT_CONFIG["user_agent"]

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }


@dataclass(frozen=True)
class Settings:
    workers: int
    timeout: float
    queue_size: int
    links_file: str
    log_level: str
    log_format: str
    user_agent: str

    def fetcher_config(self) -> FetcherConfig:
        return FetcherConfig(timeout=self.timeout, user_agent=self.user_agent)

    def as_dict(self) -> Dict[str, object]:
        return {
            "workers": self.workers,
            "timeout": self.timeout,
            "queue_size": self.queue_size,
            "links_file": self.links_file,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "user_agent": self.user_agent,
        }


def get_config(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Defaults overlaid with LINKCHECK_* environment variables."""
    env = os.environ if environ is None else environ
    cfg = dict(DEFAULT_CONFIG)
    for key in ALLOWED_CONFIG_KEYS:
        raw = env.get(ENV_PREFIX + key.upper())
        if raw is not None and raw.strip():
            cfg[key] = raw.strip()
    return cfg


def load_settings(overrides: Optional[Mapping[str, object]] = None,
                  environ: Optional[Mapping[str, str]] = None) -> Settings:
    cfg = get_config(environ)
    for key, value in (overrides or {}).items():
        if key not in ALLOWED_CONFIG_KEYS:
            raise ValueError(f"Allowed keys: {', '.join(sorted(ALLOWED_CONFIG_KEYS))}")
        if value is not None:
            cfg[key] = str(value)

    try:
        timeout = parse_duration(cfg["timeout"])
    except ValueError as e:
        raise ValueError(f"timeout: {e}")

    log_level = cfg["log_level"].upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
    log_format = cfg["log_format"].lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

    return Settings(
        workers=parse_positive_int(cfg["workers"], "workers"),
        timeout=timeout,
        queue_size=parse_positive_int(cfg["queue_size"], "queue_size"),
        links_file=cfg["links_file"],
        log_level=log_level,
        log_format=log_format,
        user_agent=cfg["user_agent"],
    )
