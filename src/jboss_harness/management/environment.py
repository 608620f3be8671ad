"""Environment variable management utilities.

Loads a .env file so JAVA_HOME, JBOSS_HOME and JBOSS_HARNESS_* settings can
live next to the test suite instead of in the shell profile.
"""

import logging
from pathlib import Path

from dotenv import load_dotenv


def load_dotenv_if_available(env_file: str | Path = ".env") -> tuple[bool, Path | None]:
    """Load a .env file from the current directory if it exists.

    Existing environment variables take precedence (override=False).

    Returns:
        Tuple of (success: bool, env_file_path: Path | None)
    """
    logger = logging.getLogger("cfg")

    env_file = Path(env_file)
    if not env_file.exists():
        logger.debug(f"No {env_file} file found")
        return False, None

    load_dotenv(env_file, override=False)
    return True, env_file.absolute()
