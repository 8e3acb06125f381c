from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from app.logging_setup import setup_logging
from app.ui_mainwindow import MainWindow
from core.config import StoreConfig
from core.recents_model import RecentEntryModel


def build_store(ini_path: Optional[str], config: StoreConfig):
    if ini_path:
        from storage.settings_store import SettingsFileStore

        return SettingsFileStore(Path(ini_path), value_prefix=config.value_prefix)
    from storage.registry_store import RegistryStore

    return RegistryStore()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="recent-projects", description="Reorder or prune the host's recent project list")
    parser.add_argument("--location", default=None, help="Store location holding the entries (default: RECENTS_LOCATION or Unity 5.x key)")
    parser.add_argument("--prefix", default=None, help="Value name prefix (default: RECENTS_VALUE_PREFIX or RecentlyUsedProjectPaths)")
    parser.add_argument("--ini", default=None, help="Use an INI settings file instead of the registry")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    config = StoreConfig.from_env().with_overrides(location=args.location, value_prefix=args.prefix)
    model = RecentEntryModel(build_store(args.ini, config), config)

    app = QApplication(sys.argv[:1])
    window = MainWindow(model)
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
