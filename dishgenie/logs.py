import logging

from rich.logging import RichHandler

from dishgenie.config import Config, Env


def configure_logging(config: Config) -> None:
    """Attach a single rich handler to the root logger.

    Does nothing when the root logger already has handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    handler = RichHandler(
        rich_tracebacks=config.env == Env.local,
        show_path=config.env == Env.local,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(config.log_level.upper())
