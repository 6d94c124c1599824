from __future__ import annotations

import logging
from typing import List

logger = logging.getLogger(__name__)


class Journal:
    """
    In-memory record of what the subsystems did during checkout.

    Every line is tagged with the subsystem that wrote it
    (``[Inventory] reserving 2x PROD001``) and is also forwarded to logging,
    so tests can assert on the sequence while the runner just prints it.
    """

    def __init__(self) -> None:
        self.lines: List[str] = []

    def log(self, tag: str, message: str) -> None:
        line = f"[{tag}] {message}"
        self.lines.append(line)
        logger.info(line)

    def tagged(self, tag: str) -> List[str]:
        prefix = f"[{tag}] "
        return [line for line in self.lines if line.startswith(prefix)]
