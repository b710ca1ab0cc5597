"""Host-facing callbacks and the in-process host model."""

from contractmark.sync.bridge import SyncBridge
from contractmark.sync.host import HostModel

__all__ = ["HostModel", "SyncBridge"]
