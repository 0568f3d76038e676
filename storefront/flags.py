from __future__ import annotations

from typing import Mapping, Optional

from storefront.constants import FEATURE_FLAGS


class FlagRouter:
    """Named boolean switches. Unknown flags are off."""

    def __init__(self, flags: Optional[Mapping[str, bool]] = None) -> None:
        self._flags = dict(FEATURE_FLAGS)
        self._flags.update(flags or {})

    def is_feature_enabled(self, key: str) -> bool:
        return bool(self._flags.get(key, False))

    def set_flag(self, key: str, value: bool) -> None:
        self._flags[key] = bool(value)
