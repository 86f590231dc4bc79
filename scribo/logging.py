import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(funcName)s:%(lineno)d %(message)s'
SIMPLE_FORMAT = '%(asctime)s %(levelname)s %(message)s'


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    enable_structured_logging: bool = False,
) -> None:
    """Configure logging with optional file rotation and structured output."""

    # Environment wins over the argument
    env_level = os.getenv('SCRIBO_LOG_LEVEL', '').upper()
    if env_level in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
        level = getattr(logging, env_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if enable_structured_logging:
        console_formatter = StructuredFormatter()
    else:
        console_formatter = logging.Formatter(LOG_FORMAT)

    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)

        if enable_structured_logging:
            file_formatter = StructuredFormatter()
        else:
            file_formatter = logging.Formatter(LOG_FORMAT)

        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    configure_review_loggers(level)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured - Level: {logging.getLevelName(level)}")
    if log_file:
        logger.info(f"Log file: {log_file}")


def configure_review_loggers(level: int) -> None:
    """Configure loggers for the rule, storage and review components."""

    review_loggers = [
        'scribo.rules.source_parser',
        'scribo.storage.cache',
        'scribo.storage.store',
        'scribo.review.client',
        'scribo.review.session',
        'scribo.review.orchestrator',
    ]

    for logger_name in review_loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)

    # Outbound HTTP chatter is only useful when debugging the analyzer link
    if level == logging.DEBUG:
        logging.getLogger('httpx').setLevel(logging.DEBUG)
    else:
        logging.getLogger('httpx').setLevel(logging.WARNING)


class StructuredFormatter(logging.Formatter):
    """Structured JSON formatter for production logging."""

    def format(self, record: logging.LogRecord) -> str:
        import json
        from datetime import datetime, timezone

        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'rule_kind'):
            log_entry['rule_kind'] = record.rule_kind
        if hasattr(record, 'content_hash'):
            log_entry['content_hash'] = record.content_hash
        if hasattr(record, 'storage_key'):
            log_entry['storage_key'] = record.storage_key

        return json.dumps(log_entry, ensure_ascii=False)


def get_review_logger(name: str) -> logging.Logger:
    """Get a logger for review orchestration components."""
    return logging.getLogger(f'scribo.review.{name}')
