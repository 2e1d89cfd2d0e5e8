"""Test configuration."""

from pathlib import Path
import os
import tempfile

os.environ["ENVIRONMENT"] = "testing"

# Guardrail: never run tests against a real store.
test_root = Path(tempfile.gettempdir()) / "bundle-analyser-tests"
test_root.mkdir(parents=True, exist_ok=True)
test_db = test_root / "bundle_sizes.test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db.as_posix()}"
os.environ["STAGING_DIR"] = str(test_root / "bundle")
os.environ["STATIC_DIR"] = str(test_root / "no-frontend")
os.environ["IMPORT_MAP"] = "http://manifest.test/importmap.json"
os.environ["DAYS_TO_KEEP"] = "30"
