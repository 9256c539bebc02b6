"""Runtime settings read from the environment (and a local .env, if present)."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

DEFAULT_RESOLVERS = "1.1.1.1,1.0.0.1,8.8.8.8,8.8.4.4,9.9.9.9,149.112.112.112"


def _split(value: str) -> list:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    api_key: str = ""
    resolvers: list = field(default_factory=lambda: _split(DEFAULT_RESOLVERS))
    dns_timeout: float = 5.0
    dns_retries: int = 2
    dns_rate: float = 50.0
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_key=os.getenv("DMARC_INSPECTOR_API_KEY", ""),
            resolvers=_split(os.getenv("DMARC_INSPECTOR_RESOLVERS", DEFAULT_RESOLVERS)),
            dns_timeout=float(os.getenv("DMARC_INSPECTOR_DNS_TIMEOUT", "5.0")),
            dns_retries=int(os.getenv("DMARC_INSPECTOR_DNS_RETRIES", "2")),
            dns_rate=float(os.getenv("DMARC_INSPECTOR_DNS_RATE", "50.0")),
            log_level=os.getenv("DMARC_INSPECTOR_LOG_LEVEL", "WARNING").upper(),
        )
