import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# -------------------------------------------------
# Console with proper color handling
# -------------------------------------------------
console = Console(force_terminal=True, color_system="truecolor")

# Libraries that log every HTTP round trip at INFO
NOISY_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "openai": logging.WARNING,
    "urllib3": logging.WARNING,
    "pypdf": logging.ERROR,
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
}


class CustomLogger:
    """
    Configures the root logger once with a RichHandler and hands out named loggers.

    Every module logs through the same handler, so the console output of the
    API server and of the console chat loop looks the same.
    """

    _configured = False

    def __init__(self, level: int = logging.INFO):
        if not CustomLogger._configured:
            self._configure(level)
            CustomLogger._configured = True

    @staticmethod
    def _configure(level: int) -> None:
        logging.basicConfig(
            level=level,
            format="%(message)s",  # Rich handles formatting
            datefmt="[%H:%M:%S.%f]",
            handlers=[
                RichHandler(
                    console=console,
                    rich_tracebacks=True,
                    tracebacks_show_locals=False,
                    show_time=True,
                    show_level=True,
                    show_path=True,
                    log_time_format="%H:%M:%S.%f",
                )
            ],
        )

        # Silence noisy libraries
        for name, lib_level in NOISY_LOGGERS.items():
            logging.getLogger(name).setLevel(lib_level)

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        return logging.getLogger(name or "doc_analyzer")
