"""Logging setup shared by the CLI and test harnesses."""

import logging

from rich.logging import RichHandler


PLAIN_FORMAT = '%(asctime)s.%(msecs)03d [%(levelname)-5s] [%(name)-15s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(use_color: bool = True, level: int = logging.INFO, console_level: int | None = None):
    """Setup logging based on color preference.

    Args:
        use_color: If True, use Rich colored logging; if False, use plain text
        level: Root log level
        console_level: Level of the 'jboss' logger relaying server console
            output (default: unchanged, so console lines show only at DEBUG)
    """
    if not use_color:
        logging.basicConfig(level=level, format=PLAIN_FORMAT, datefmt=DATE_FORMAT)
    else:
        logging.basicConfig(
            level=level,
            format='%(message)s',
            handlers=[RichHandler(
                show_time=True,
                show_level=True,
                show_path=False,
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                log_time_format=DATE_FORMAT
            )]
        )

    if console_level is not None:
        logging.getLogger("jboss").setLevel(console_level)
