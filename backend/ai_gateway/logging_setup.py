"""
AI Gateway — Logging Configuration
===================================

What:  One-call setup of the stdlib logging tree for processes embedding the gateway.
Why:   Every module logs through `logging.getLogger(__name__)`; the host decides
       where records go. This gives it the same format the gateway's logs assume.
When:  Called once at process startup, before the service is created.
"""

import logging
import sys
from typing import Optional

from ai_gateway.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger to write to stdout.

    Args:
        level: Level name override; defaults to settings.log_level.
    """
    level_name = (level or settings.log_level).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # The provider SDK logs every HTTP exchange at INFO
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)
