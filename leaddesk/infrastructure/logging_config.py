"""
LOGGING
========

Em produção cada linha de log é um JSON (fácil de filtrar por lead_id,
user_id etc). Em desenvolvimento o formato é texto, mais fácil de ler no terminal.

Uso nos módulos:
    logger = logging.getLogger(__name__)
    logger.info("Lead atribuído", extra={"lead_id": lead.id, "to_user_id": user.id})
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

SERVICE_NAME = "leaddesk"

# Atributos padrão do LogRecord; o resto veio de `extra=`
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def extract_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Campos passados em `extra={...}`."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Uma linha JSON por registro, com os campos de `extra` no mesmo nível."""

    def __init__(self, service: str = SERVICE_NAME):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_record.update(extract_extra(record))

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Formato legível para desenvolvimento: extras no fim como chave=valor."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s [%(name)s] %(message)s", "%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra = extract_extra(record)
        if extra:
            line += " | " + " ".join(f"{k}={v}" for k, v in extra.items())
        return line


def setup_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configura o logger raiz (chamado uma vez, no import da API).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_logs else TextFormatter())

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers = [handler]

    # Uvicorn passa a usar o handler do root
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers = []

    # SQL só aparece com DEBUG=true (echo da engine)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
