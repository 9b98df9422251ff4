from __future__ import annotations

import logging
from dataclasses import dataclass, field

from wp_starter.config.config import Config
from wp_starter.foundation.paths import Paths


@dataclass
class Locator:
    """Shared context handed to every step constructor."""

    config: Config
    paths: Paths
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("wp_starter"))
