from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_LOCATION = r"Software\Unity Technologies\Unity Editor 5.x"
DEFAULT_VALUE_PREFIX = "RecentlyUsedProjectPaths"

ENV_LOCATION = "RECENTS_LOCATION"
ENV_VALUE_PREFIX = "RECENTS_VALUE_PREFIX"
ENV_LOG_LEVEL = "RECENTS_LOG_LEVEL"


@dataclass(frozen=True)
class StoreConfig:
    location: str = DEFAULT_LOCATION
    value_prefix: str = DEFAULT_VALUE_PREFIX

    @classmethod
    def from_env(cls) -> "StoreConfig":
        location = os.environ.get(ENV_LOCATION, "").strip() or DEFAULT_LOCATION
        prefix = os.environ.get(ENV_VALUE_PREFIX, "").strip() or DEFAULT_VALUE_PREFIX
        return cls(location=location, value_prefix=prefix)

    def with_overrides(self, location: str | None = None, value_prefix: str | None = None) -> "StoreConfig":
        return StoreConfig(
            location=location or self.location,
            value_prefix=value_prefix or self.value_prefix,
        )
