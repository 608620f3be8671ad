"""Strategies for reading the server's "Started" status out of a management response.

The management console reports bean attributes as text, and the exact layout
differs between server versions. Parsers are pluggable so a different console
format only needs a new ReadinessParser, not a new ControlChannel.
"""

import logging
import re
from abc import ABC, abstractmethod


logger = logging.getLogger("ctl")


class ReadinessParser(ABC):
    """Decides whether an inspect response reports the server as started."""

    @abstractmethod
    def parse(self, body: str) -> bool:
        """Return True if the body reports the server as started.

        Implementations must return False for malformed or unexpected input
        instead of raising.
        """
        pass


class RegexStatusParser(ReadinessParser):
    """Extracts a status token with a regular expression.

    The first capture group of ``pattern`` is compared to ``ready_value``.

    Args:
        pattern: Regular expression (string or compiled) with one capture group
        ready_value: Token meaning "started"
        flags: Regex flags used when ``pattern`` is a string
    """

    def __init__(self, pattern: str | re.Pattern, ready_value: str = "True", flags: int = 0):
        if isinstance(pattern, str):
            pattern = re.compile(pattern, flags)
        self.pattern = pattern
        self.ready_value = ready_value

    def parse(self, body: str) -> bool:
        if not body:
            return False
        match = self.pattern.search(body)
        if match is None:
            logger.debug("No status block found in management response")
            return False
        return match.group(1) == self.ready_value


class JmxConsoleStatusParser(RegexStatusParser):
    """Parser for the legacy JMX console HtmlAdaptor page.

    The inspect page renders the ``Started`` attribute name in a table cell
    followed by its value in a ``<pre>`` block on its own line.
    """

    STATUS_PATTERN = r">Started<.*?<pre>\s+^(\w+)"

    def __init__(self):
        super().__init__(self.STATUS_PATTERN, ready_value="True", flags=re.DOTALL | re.MULTILINE)
