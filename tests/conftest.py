import os
import sys
from pathlib import Path

import pytest

# Must be set before PySide6 is imported by any test module.
if sys.platform.startswith("linux"):
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.config import StoreConfig  # noqa: E402
from storage.stores import MemoryStore  # noqa: E402

LOCATION = r"Software\Unity Technologies\Unity Editor 5.x"
PREFIX = "RecentlyUsedProjectPaths"


@pytest.fixture
def config():
    return StoreConfig(location=LOCATION, value_prefix=PREFIX)


@pytest.fixture
def hash_store():
    return MemoryStore(namespaces={
        LOCATION: {
            f"{PREFIX}-0_h1111": b"/Users/me/Projects/Alpha\0",
            f"{PREFIX}-1_h2222": b"/Users/me/Projects/Beta\0",
            "UnityEditorLastLayout_h9999": b"Default\0",
            f"{PREFIX}-2_h3333": b"/Users/me/Projects/Gamma\0",
        }
    })


@pytest.fixture
def index_store():
    return MemoryStore(namespaces={
        LOCATION: {
            f"{PREFIX}0": b"/work/one\0",
            f"{PREFIX}1": b"/work/two\0",
            f"{PREFIX}2": b"/work/three\0",
        }
    })
