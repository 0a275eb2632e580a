from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from .errors import MissingConfiguration


# Values shipped in sample configs; treated the same as an unset variable.
PLACEHOLDER_ENDPOINTS = frozenset(
    {
        "YOUR_DOCUMENT_INTELLIGENCE_ENDPOINT",
        "https://your-resource-name.cognitiveservices.azure.com/",
    }
)
PLACEHOLDER_KEYS = frozenset({"YOUR_DOCUMENT_INTELLIGENCE_KEY", "fake-key-for-testing-only"})


def is_http_url(value: str | None) -> bool:
    if not value:
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() not in ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class Settings:
    api_title: str = "docinsight"

    # Azure Document Intelligence
    azure_endpoint: str = os.getenv(
        "AZURE_FORM_RECOGNIZER_ENDPOINT", "https://your-resource-name.cognitiveservices.azure.com/"
    )
    azure_api_key: str = os.getenv("AZURE_FORM_RECOGNIZER_KEY", "fake-key-for-testing-only")
    model_id: str = os.getenv("DOCINSIGHT_MODEL_ID", "prebuilt-document")
    api_version: str = os.getenv("DOCINSIGHT_API_VERSION", "2023-07-31")

    # Uploads
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

    # Polling
    poll_interval_seconds: float = float(os.getenv("POLL_INTERVAL_SECONDS", "2"))
    max_poll_attempts: int = int(os.getenv("MAX_POLL_ATTEMPTS", "30"))
    request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

    debug_logs: bool = _env_flag("DEBUG_LOGS")

    def missing_configuration(self) -> list[str]:
        missing: list[str] = []
        endpoint = self.azure_endpoint.strip()
        if endpoint in PLACEHOLDER_ENDPOINTS or not is_http_url(endpoint):
            missing.append("AZURE_FORM_RECOGNIZER_ENDPOINT")
        if not self.azure_api_key.strip() or self.azure_api_key.strip() in PLACEHOLDER_KEYS:
            missing.append("AZURE_FORM_RECOGNIZER_KEY")
        return missing


def ensure_configured(cfg: Settings) -> None:
    missing = cfg.missing_configuration()
    if missing:
        raise MissingConfiguration(missing)


settings = Settings()
