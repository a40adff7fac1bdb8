import logging
import logging.config
import os
from pathlib import Path

from .core.config import settings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def configure_logging() -> None:
    """Load logging.conf once at startup; plain console logging when it is absent."""
    config_path = Path(settings.LOGGING_CONFIG) if settings.LOGGING_CONFIG else PROJECT_ROOT / "logging.conf"

    if not config_path.exists():
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
        )
        logging.getLogger(__name__).warning(f"Logging config {config_path} not found, using basicConfig")
        return

    # Ensure logs directory exists
    os.makedirs("logs", exist_ok=True)
    logging.config.fileConfig(config_path, disable_existing_loggers=False)
