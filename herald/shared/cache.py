from time import time
from typing import Any, Callable, Dict, Optional, Tuple


class TTLCache:
    def __init__(self, ttl_seconds: float = 900, clock: Callable[[], float] = time):
        self.ttl = ttl_seconds
        self.clock = clock
        # key -> (expires_at, value)
        self.store: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str):
        now = self.clock()
        item = self.store.get(key)
        if not item:
            return None
        expires_at, val = item
        if now >= expires_at:
            self.store.pop(key, None)
            return None
        return val

    def set(self, key: str, val: Any, ttl_seconds: Optional[float] = None):
        ttl = self.ttl if ttl_seconds is None else ttl_seconds
        self.store[key] = (self.clock() + ttl, val)

    def delete(self, key: str):
        self.store.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self.store if k.startswith(prefix)]
        for k in keys:
            self.store.pop(k, None)
        return len(keys)
