import os
from pathlib import Path

# The root directory of the project
ROOT_DIR = Path(os.path.dirname(os.path.abspath(__file__))).parent

# Common file paths
SCAM_DB_FILE = ROOT_DIR / "scams.json"
README_FILE = ROOT_DIR / "README.md"
