from __future__ import annotations

import logging
from typing import List

from PySide6.QtGui import QCloseEvent, QFontDatabase
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from app import VERSION
from core.errors import LoadFailure, WriteFailure
from core.recents_model import RecentEntryModel

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, model: RecentEntryModel) -> None:
        super().__init__()
        self.model = model

        self.setWindowTitle(f"Recent Project Manager {VERSION}")
        self.resize(720, 420)

        self._build_layout()
        self._load()

    def _build_layout(self) -> None:
        container = QWidget()
        layout = QVBoxLayout(container)

        self.status_label = QLabel()
        layout.addWidget(self.status_label)

        self.project_list = QListWidget()
        self.project_list.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self.project_list.setFont(QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont))
        layout.addWidget(self.project_list)

        buttons = QHBoxLayout()

        def add_button(title: str, handler) -> QPushButton:
            button = QPushButton(title)
            button.clicked.connect(handler)
            buttons.addWidget(button)
            return button

        self.delete_button = add_button("Delete selected", self.on_delete)
        self.move_up_button = add_button("Move up", self.on_move_up)
        self.move_down_button = add_button("Move down", self.on_move_down)
        buttons.addStretch()
        self.revert_button = add_button("Revert", self.on_revert)
        self.save_button = add_button("Save", self.on_save)
        layout.addLayout(buttons)

        self.setCentralWidget(container)

    def _load(self) -> None:
        try:
            self.model.load()
        except LoadFailure as exc:
            QMessageBox.warning(self, "Load", str(exc))
        self._refresh_list()

    def _refresh_list(self) -> None:
        self.project_list.clear()
        for row in self.model.get_display_rows():
            self.project_list.addItem(row.text)
        if self.model.loaded_successfully:
            self.status_label.setText(f"{len(self.model)} recent projects")
        else:
            self.status_label.setText("No recent project list found")
        self.save_button.setEnabled(self.model.loaded_successfully)

    def selected_rows(self) -> List[int]:
        return sorted(self.project_list.row(item) for item in self.project_list.selectedItems())

    def on_delete(self) -> None:
        if self.model.delete(self.selected_rows()):
            self._refresh_list()

    def on_move_up(self) -> None:
        self._select_after_move(self.model.move_up(self.selected_rows()))

    def on_move_down(self) -> None:
        self._select_after_move(self.model.move_down(self.selected_rows()))

    def _select_after_move(self, new_row) -> None:
        if new_row is None:
            return
        self._refresh_list()
        self.project_list.setCurrentRow(new_row)

    def on_revert(self) -> None:
        self._load()

    def on_save(self) -> bool:
        try:
            return self.model.save()
        except WriteFailure as exc:
            logger.error("Save failed: %s", exc)
            QMessageBox.warning(self, "Save", f"Recent projects could not be saved:\n{exc}")
            return False

    def closeEvent(self, event: QCloseEvent) -> None:
        self.on_save()
        super().closeEvent(event)
