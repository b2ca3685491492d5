import os
import sys
from pathlib import Path

import pytest

# Ensure the src directory is on the path for imports
root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(root / "src"))

log_dir = root / "logs"
log_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("OPENAICLI_LOG_DIR", str(log_dir))
# Keep the developer's ~/.openaicli out of the test run.
os.environ.setdefault("OPENAICLI_CONFIG_DIR", str(log_dir / "config"))


@pytest.fixture(autouse=True)
def _clean_openai_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("OPENAI_") or (key.startswith("OPENAICLI_") and key not in {"OPENAICLI_LOG_DIR", "OPENAICLI_CONFIG_DIR"}):
            monkeypatch.delenv(key, raising=False)
