"""
Logging setup for the LINAC Access Mapper.

Streamlit re-executes app.py on every interaction; setup_logging only
attaches handlers the first time it runs in a process.
"""

import logging
from pathlib import Path
from typing import Optional

from config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Chatty dependencies of the boundary lookups and the loader
QUIET_LOGGERS = ("urllib3", "osmnx", "shapely", "geopandas", "pyogrio")


def setup_logging(log_dir: Optional[Path] = None, level: Optional[str] = None) -> None:
    """
    Configure console and file logging for the application.

    Args:
        log_dir: Directory for app.log (default: <project>/logs)
        level: Level name (default: Config.LOG_LEVEL)
    """
    log_dir = Path(log_dir) if log_dir is not None else Path(__file__).parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    level_name = (level or Config.LOG_LEVEL).upper()

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            format=LOG_FORMAT,
            handlers=[
                logging.StreamHandler(),
                logging.FileHandler(log_dir / "app.log", encoding="utf-8")
            ]
        )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
