from __future__ import annotations

import logging
from collections import Counter
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from storage.stores import StoreAdapter

from .config import StoreConfig
from .entry import DisplayRow, Entry, decode, display_parts, encode
from .errors import DecodeWarning, KeyCollision, KeyNotFound, LoadFailure, NamespaceNotFound, StoreError, WriteFailure
from .key_scheme import HashSuffixedScheme, KeyScheme, detect_scheme

logger = logging.getLogger(__name__)

Selection = Union[int, Iterable[int]]


class LoadState(Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


class RecentEntryModel:
    """Ordered list of recent entries synchronised with a key/value store.

    Only a successful load opens the save path: if the namespace was never
    observed, ``save()`` leaves the store untouched.
    """

    def __init__(self, store: StoreAdapter, config: Optional[StoreConfig] = None) -> None:
        self.store = store
        self.config = config or StoreConfig()
        self.entries: List[Entry] = []
        self.state = LoadState.UNLOADED
        self.scheme: KeyScheme = HashSuffixedScheme(self.config.value_prefix)

    @property
    def loaded_successfully(self) -> bool:
        return self.state is LoadState.LOADED

    def __len__(self) -> int:
        return len(self.entries)

    def load(self) -> List[Entry]:
        prefix = self.config.value_prefix
        try:
            handle = self.store.open(self.config.location, writable=False)
        except NamespaceNotFound:
            logger.info("Namespace %s not found; nothing to load", self.config.location)
            self.entries = []
            self.state = LoadState.LOAD_FAILED
            return self.entries
        except StoreError as exc:
            self.entries = []
            self.state = LoadState.LOAD_FAILED
            raise LoadFailure(f"Cannot open {self.config.location}: {exc}") from exc

        entries: List[Entry] = []
        try:
            names = [name for name in self.store.enumerate_keys(handle) if name.startswith(prefix)]
            scheme = detect_scheme(names, prefix)
            for name in names:
                try:
                    raw = self.store.get_value(handle, name)
                    entries.append(decode(raw, key_suffix=scheme.suffix_for(name)))
                except (KeyNotFound, DecodeWarning) as exc:
                    logger.warning("Skipping %s: %s", name, exc)
        except StoreError as exc:
            self.entries = []
            self.state = LoadState.LOAD_FAILED
            raise LoadFailure(f"Cannot read {self.config.location}: {exc}") from exc
        finally:
            try:
                self.store.close(handle)
            except StoreError as exc:
                self.entries = []
                self.state = LoadState.LOAD_FAILED
                raise LoadFailure(f"Cannot release {self.config.location}: {exc}") from exc

        self.entries = entries
        self.scheme = scheme
        self.state = LoadState.LOADED
        logger.info("Loaded %d recent entries (%s keys)", len(entries), scheme.name)
        return self.entries

    def revert(self) -> List[Entry]:
        return self.load()

    def get_display_rows(self) -> List[DisplayRow]:
        return [display_parts(entry) for entry in self.entries]

    def delete(self, indices: Iterable[int]) -> int:
        selected = set(indices)
        if not selected:
            return 0
        kept = [entry for idx, entry in enumerate(self.entries) if idx not in selected]
        removed = len(self.entries) - len(kept)
        self.entries = kept
        logger.debug("Deleted %d entries", removed)
        return removed

    def move_up(self, selected: Selection) -> Optional[int]:
        index = self._single_selection(selected)
        if index is None or index == 0:
            return None
        return self._swap(index, index - 1)

    def move_down(self, selected: Selection) -> Optional[int]:
        index = self._single_selection(selected)
        if index is None or index == len(self.entries) - 1:
            return None
        return self._swap(index, index + 1)

    def save_plan(self) -> List[Tuple[str, bytes]]:
        """Return ``(key, data)`` pairs in the order they would be written."""
        plan = [(self.scheme.compute_key(entry, pos), encode(entry)) for pos, entry in enumerate(self.entries)]
        counts = Counter(key for key, _ in plan)
        duplicates = sorted(key for key, count in counts.items() if count > 1)
        if duplicates:
            raise KeyCollision(f"Duplicate keys in save: {', '.join(duplicates)}")
        return plan

    def save(self) -> bool:
        if self.state is not LoadState.LOADED:
            logger.info("Skipping save: recent entries were not loaded (%s)", self.state.value)
            return False

        prefix = self.config.value_prefix
        plan = self.save_plan()
        try:
            handle = self.store.open(self.config.location, writable=True)
        except StoreError as exc:
            raise WriteFailure(f"Cannot open {self.config.location} for writing: {exc}") from exc
        try:
            for name in list(self.store.enumerate_keys(handle)):
                if name.startswith(prefix):
                    self.store.delete_value(handle, name)
            for key, data in plan:
                self.store.set_value(handle, key, data)
        except StoreError as exc:
            raise WriteFailure(f"Saving recent entries failed: {exc}") from exc
        finally:
            try:
                self.store.close(handle)
            except StoreError as exc:
                raise WriteFailure(f"Cannot release {self.config.location}: {exc}") from exc
        logger.info("Saved %d recent entries", len(plan))
        return True

    def _single_selection(self, selected: Selection) -> Optional[int]:
        positions = {selected} if isinstance(selected, int) else set(selected)
        if len(positions) != 1:
            logger.debug("Move ignored: %d positions selected", len(positions))
            return None
        index = positions.pop()
        if not 0 <= index < len(self.entries):
            logger.debug("Move ignored: position %d out of range", index)
            return None
        return index

    def _swap(self, index: int, other: int) -> int:
        self.entries[index], self.entries[other] = self.entries[other], self.entries[index]
        return other
