import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_CONFIG = {
    "VIRTREST_URI": "qemu:///system",
    "VIRTREST_HOST": "",
    "VIRTREST_PORT": "8080",
    "VIRTREST_LOG_LEVEL": "INFO",
    "VIRTREST_LOG_FILE": "",
}
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AppConfig:
    hypervisor_uri: str
    host: str
    port: int
    log_level: str
    log_file: Optional[str]

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


def _require_port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"VIRTREST_PORT must be an integer, got {raw!r}")
    if not 1 <= port <= 65535:
        raise ValueError("VIRTREST_PORT must be between 1 and 65535")
    return port


def load_config(environ: Mapping[str, str] = os.environ) -> AppConfig:
    payload = {key: environ.get(key, default) for key, default in DEFAULT_CONFIG.items()}

    uri = payload["VIRTREST_URI"].strip()
    log_level = payload["VIRTREST_LOG_LEVEL"].strip().upper()
    log_file = payload["VIRTREST_LOG_FILE"].strip()

    if not uri:
        raise ValueError("VIRTREST_URI must not be empty")
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"VIRTREST_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")

    return AppConfig(
        hypervisor_uri=uri,
        host=payload["VIRTREST_HOST"].strip(),
        port=_require_port(payload["VIRTREST_PORT"].strip()),
        log_level=log_level,
        log_file=log_file or None,
    )
