import logging
from rich.logging import RichHandler


def configure(level: str = "INFO") -> None:
    """Console logging for scripts. Library modules only create loggers."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_time=False, show_path=False)],
    )
    # urllib3 connection chatter drowns the engine's own messages at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
