from __future__ import annotations

import hashlib
from typing import Optional


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hash_text(text: str) -> str:
    return hash_bytes(text.encode("utf-8"))


class ThemeCache:
    """Parsed theme skeletons for a single generation run, keyed by theme name.

    The stored text has the global placeholders filled in but still carries
    the per-page ones (content, page title, root and home paths). Callers
    substitute into the returned string, which leaves the cached copy intact.
    """

    def __init__(self) -> None:
        self._skeletons: dict[str, str] = {}
        self.loads = 0

    def get(self, name: str) -> Optional[str]:
        return self._skeletons.get(name)

    def store(self, name: str, skeleton: str) -> None:
        self.loads += 1
        self._skeletons[name] = skeleton
