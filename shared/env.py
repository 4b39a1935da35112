import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_env(root: Optional[Path]):
    if root is None:
        return
    # Base .env
    load_dotenv(root / ".env", override=False)
    # Preferred environment location
    load_dotenv(root / "config/environments/scanner.env", override=False)
    # Secrets override
    load_dotenv(root / "secrets/.env.runtime", override=False)
    # Export root for portability
    os.environ.setdefault("SCAM_TRACKER_ROOT", str(root))
