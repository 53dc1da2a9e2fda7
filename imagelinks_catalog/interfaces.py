from typing import Optional, Protocol, runtime_checkable


# Interfaces
@runtime_checkable
class KeyValueStoreInterface(Protocol):
    # Protocol for the external key-value store

    def get(self, key: str) -> Optional[str]:
        # Value stored under key, None when absent or expired
        ...

    def put(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        # Overwrite key atomically; ttl in seconds
        ...

    def delete(self, key: str) -> None:
        # Remove key if present
        ...

    def close(self) -> None:
        # Release any held resources
        ...


@runtime_checkable
class ProberInterface(Protocol):
    # Protocol for URL reachability checks used by the liveness sweep

    def is_reachable(self, url: str) -> bool:
        # True when the URL answers with a 2xx or 3xx status in time
        ...

    def close(self) -> None:
        ...
