"""Structured JSON logging with credential redaction."""

import logging
import re
import sys
from typing import Iterable, List
from pythonjsonlogger import jsonlogger
from connector_hub.infra.config import config

REDACTED = "[REDACTED]"

# "Bearer abc", "Basic dXNlcjpwdw=="
_CREDENTIAL_PATTERN = re.compile(r"\b(Bearer|Basic)\s+[^\s,;\"']+")
_QUERY_KEY_PATTERN = re.compile(r"([?&]key=)[^&\s]+")


class SecretRedactionFilter(logging.Filter):
    """Masks auth header values, ``key=`` query parameters and server secrets in messages.

    Attached to the handler so records from every ``connector_hub.*`` logger pass through it.
    """

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        # Very short values would mask unrelated text
        self.secrets: List[str] = [s for s in secrets if s and len(s) >= 8]

    def redact(self, message: str) -> str:
        message = _CREDENTIAL_PATTERN.sub(lambda m: f"{m.group(1)} {REDACTED}", message)
        message = _QUERY_KEY_PATTERN.sub(lambda m: f"{m.group(1)}{REDACTED}", message)
        for secret in self.secrets:
            message = message.replace(secret, REDACTED)
        return message

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def server_secrets() -> List[str]:
    return [
        config.SUPABASE_SERVICE_ROLE_KEY,
        config.GOOGLE_TRANSLATE_API_KEY,
        config.DATABASE_URL,
    ]


def setup_logging():
    """Setup structured JSON logging on the ``connector_hub`` logger."""
    logger = logging.getLogger("connector_hub")
    logger.setLevel(logging.DEBUG if config.DEBUG else logging.INFO)

    # Remove existing handlers
    logger.handlers = []

    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
        static_fields={"service": "connector-hub", "environment": config.APP_ENV},
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SecretRedactionFilter(server_secrets()))
    logger.addHandler(console_handler)

    # httpx logs full request URLs, which may carry API keys
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)

    return logger


# Initialize logging
app_logger = setup_logging()
