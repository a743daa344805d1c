import logging
import sys
from typing import Iterable, Optional

class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True # If no namespaces are specified, allow all records
        # Allow record if its name starts with any of the allowed namespaces
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)

log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

APP_LOGGER_NAME = "storefront"
CONSOLE_HANDLER_NAME = "storefront-console"


def configure_logging(level: str = "INFO", allowed_namespaces: Optional[Iterable[str]] = None) -> logging.Logger:
    """
    Attaches a stdout handler to the 'storefront' logger.

    Modules log through logging.getLogger(__name__), so loggers such as
    "storefront.features.reports.service" inherit this handler and level.
    Calling this again replaces the handler instead of stacking another one.
    """
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(level.upper())

    for handler in list(app_logger.handlers):
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    if allowed_namespaces:
        console_handler.addFilter(NamespaceFilter(list(allowed_namespaces)))
    app_logger.addHandler(console_handler)

    # Tortoise SQL logging stays quiet unless explicitly debugging
    logging.getLogger("tortoise").setLevel(logging.WARNING)
    return app_logger
