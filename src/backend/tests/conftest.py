import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...`, `import services...`
# work even when pytest's rootdir is the repository root.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    # The CLI configures structlog globally; keep each test on the defaults.
    yield
    structlog.reset_defaults()
