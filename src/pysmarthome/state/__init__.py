"""State/store layer.

The store is the only shared resource of the hub: every synchronization
loop reads snapshots from it and every record request writes through it.
"""

from pysmarthome.state.store import DeviceStore, MemoryDeviceStore

__all__ = ["DeviceStore", "MemoryDeviceStore"]
