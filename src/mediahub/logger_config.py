import logging
import os
import sys
from pythonjsonlogger import jsonlogger

DEFAULT_LOG_LEVEL = "INFO"


def setup_logging(level=None):
    """
    Sets up centralized logging for MediaHub to output structured JSON logs.

    Logs are directed to stderr so that stdout stays free for whatever the
    host process uses it for. The level comes from ``level``, then the
    MEDIAHUB_LOG_LEVEL environment variable, then INFO.
    """
    level_name = (level or os.environ.get("MEDIAHUB_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger('mediahub')
    logger.setLevel(log_level)

    # Prevent adding multiple handlers if setup_logging is called multiple times
    if not logger.handlers:
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={'levelname': 'level', 'asctime': 'timestamp', 'name': 'logger'},
            json_ensure_ascii=False
        )

        class DefaultFieldsFilter(logging.Filter):
            def filter(self, record):
                record.service = 'mediahub'
                return True

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        # Handler filters also see records propagated from child loggers.
        handler.addFilter(DefaultFieldsFilter())
        logger.addHandler(handler)

    return logger
