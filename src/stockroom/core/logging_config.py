import logging
import sys

from .config import LOG_LEVEL


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True  # No namespaces configured, let everything through
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def configure_logging(level: str = LOG_LEVEL, allowed_namespaces=None) -> logging.Logger:
    """Attaches the stdout handler to the ``stockroom`` logger.

    Modules log through ``logging.getLogger(__name__)`` so their records
    propagate up to this logger. Calling this more than once does not stack
    handlers.
    """
    app_logger = logging.getLogger("stockroom")
    app_logger.setLevel(level)

    if not any(getattr(h, "_stockroom_console", False) for h in app_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(log_formatter)
        console_handler._stockroom_console = True
        if allowed_namespaces:
            console_handler.addFilter(NamespaceFilter(allowed_namespaces))
        app_logger.addHandler(console_handler)

    # Stock movements are worth seeing at DEBUG while the ledger is young
    logging.getLogger("stockroom.features.sales").setLevel(logging.DEBUG)

    # Quieter export rendering:
    # logging.getLogger("stockroom.features.reports.rendering").setLevel(logging.WARNING)

    return app_logger


# To print the SQL Tortoise sends:
# logging.getLogger("tortoise.db_client").setLevel(logging.DEBUG)
