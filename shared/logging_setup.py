import logging
import sys
from pathlib import Path


def setup_logging(app_name: str, root_dir: Path, level: str = "INFO"):
    """
    Setup logging with file and console output

    Args:
        app_name: Name of the application/component
        root_dir: Root directory for log file storage
        level: Logging level name (default: INFO)
    """
    log_file = root_dir / "logs" / f"{app_name}.log"

    # Define log format
    fmt = "%(asctime)s %(levelname)s %(name)s - %(message)s"

    # Setup handlers
    handlers = [logging.StreamHandler(sys.stdout)]

    try:
        # Create logs directory and add file handler
        log_file.parent.mkdir(exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    except OSError as e:
        print(f"Warning: Could not create log file {log_file}: {e}")

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        handlers=handlers,
        force=True,
    )

    # urllib3 logs every retried connection at WARNING
    logging.getLogger("urllib3").setLevel(logging.ERROR)
