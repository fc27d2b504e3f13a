"""Virtio MMIO register offsets and the layouts of virtqueue structures.

All structures are little-endian, as laid out in guest memory.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

MMIO_BASE = 0x10001000
"""Address at which the control registers are mapped."""

MAGIC = 0x74726976
"""Value of the magic register."""

VENDOR = 0x554D4551
"""Value of the vendor id register."""

# Status register bits.
VIRTIO_CONFIG_S_ACKNOWLEDGE = 1
VIRTIO_CONFIG_S_DRIVER = 2
VIRTIO_CONFIG_S_DRIVER_OK = 4
VIRTIO_CONFIG_S_FEATURES_OK = 8

# Device feature bits.
VIRTIO_BLK_F_RO = 5
VIRTIO_BLK_F_SCSI = 7
VIRTIO_BLK_F_CONFIG_WCE = 11
VIRTIO_BLK_F_MQ = 12
VIRTIO_F_ANY_LAYOUT = 27
VIRTIO_RING_F_INDIRECT_DESC = 28
VIRTIO_RING_F_EVENT_IDX = 29

NUM = 8
"""Number of descriptors; a power of two."""

VRING_DESC_F_NEXT = 1
VRING_DESC_F_WRITE = 2

VIRTIO_BLK_T_IN = 0
VIRTIO_BLK_T_OUT = 1


class MmioRegister(IntEnum):
    """Offsets of the control registers from the MMIO base."""

    MAGIC_VALUE = 0x000
    VERSION = 0x004
    DEVICE_ID = 0x008
    VENDOR_ID = 0x00C
    DEVICE_FEATURES = 0x010
    DRIVER_FEATURES = 0x020
    QUEUE_SEL = 0x030
    QUEUE_NUM_MAX = 0x034
    QUEUE_NUM = 0x038
    QUEUE_READY = 0x044
    QUEUE_NOTIFY = 0x050
    INTERRUPT_STATUS = 0x060
    INTERRUPT_ACK = 0x064
    STATUS = 0x070
    QUEUE_DESC_LOW = 0x080
    QUEUE_DESC_HIGH = 0x084
    DRIVER_DESC_LOW = 0x090
    DRIVER_DESC_HIGH = 0x094
    DEVICE_DESC_LOW = 0x0A0
    DEVICE_DESC_HIGH = 0x0A4


def _pack(layout: struct.Struct, *values: int) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise ValueError(str(exc)) from exc


def _unpack(layout: struct.Struct, data: bytes, name: str) -> tuple[int, ...]:
    if len(data) != layout.size:
        raise ValueError(f"{name} needs {layout.size} bytes, got {len(data)}")
    return layout.unpack(data)


def _check_ring(ring: list, name: str) -> None:
    if len(ring) != NUM:
        raise ValueError(f"{name} ring must have {NUM} entries, not {len(ring)}")


@dataclass
class VirtqDesc:
    """One descriptor: a buffer's address, length and chaining."""

    addr: int = 0
    length: int = 0
    flags: int = 0
    next: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<QIHH")
    SIZE: ClassVar[int] = _LAYOUT.size

    def pack(self) -> bytes:
        """Return the descriptor's bytes."""
        return _pack(self._LAYOUT, self.addr, self.length, self.flags, self.next)

    @classmethod
    def unpack(cls, data: bytes) -> VirtqDesc:
        """Build a descriptor from exactly ``SIZE`` bytes."""
        return cls(*_unpack(cls._LAYOUT, data, "descriptor"))


@dataclass
class VirtqAvail:
    """The available ring: chain heads offered to the device."""

    flags: int = 0
    idx: int = 0
    ring: list[int] = field(default_factory=lambda: [0] * NUM)
    unused: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct(f"<HH{NUM}HH")
    SIZE: ClassVar[int] = _LAYOUT.size

    def pack(self) -> bytes:
        """Return the ring's bytes."""
        _check_ring(self.ring, "avail")
        return _pack(self._LAYOUT, self.flags, self.idx, *self.ring, self.unused)

    @classmethod
    def unpack(cls, data: bytes) -> VirtqAvail:
        """Build the ring from exactly ``SIZE`` bytes."""
        flags, idx, *rest = _unpack(cls._LAYOUT, data, "avail ring")
        return cls(flags, idx, list(rest[:NUM]), rest[NUM])


@dataclass
class VirtqUsedElem:
    """A completed chain: its head descriptor and the bytes written."""

    id: int = 0
    length: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<II")
    SIZE: ClassVar[int] = _LAYOUT.size

    def pack(self) -> bytes:
        """Return the entry's bytes."""
        return _pack(self._LAYOUT, self.id, self.length)

    @classmethod
    def unpack(cls, data: bytes) -> VirtqUsedElem:
        """Build the entry from exactly ``SIZE`` bytes."""
        return cls(*_unpack(cls._LAYOUT, data, "used element"))


@dataclass
class VirtqUsed:
    """The used ring, through which the device reports completions."""

    flags: int = 0
    idx: int = 0
    ring: list[VirtqUsedElem] = field(
        default_factory=lambda: [VirtqUsedElem() for _ in range(NUM)]
    )

    _HEAD: ClassVar[struct.Struct] = struct.Struct("<HH")
    SIZE: ClassVar[int] = _HEAD.size + NUM * VirtqUsedElem.SIZE

    def pack(self) -> bytes:
        """Return the ring's bytes."""
        _check_ring(self.ring, "used")
        head = _pack(self._HEAD, self.flags, self.idx)
        return head + b"".join(elem.pack() for elem in self.ring)

    @classmethod
    def unpack(cls, data: bytes) -> VirtqUsed:
        """Build the ring from exactly ``SIZE`` bytes."""
        if len(data) != cls.SIZE:
            raise ValueError(f"used ring needs {cls.SIZE} bytes, got {len(data)}")
        flags, idx = cls._HEAD.unpack_from(data)
        step = VirtqUsedElem.SIZE
        body = data[cls._HEAD.size:]
        ring = [
            VirtqUsedElem.unpack(body[start:start + step])
            for start in range(0, NUM * step, step)
        ]
        return cls(flags, idx, ring)


@dataclass
class BlkRequest:
    """The first descriptor of a disk request."""

    type: int = VIRTIO_BLK_T_IN
    reserved: int = 0
    sector: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<IIQ")
    SIZE: ClassVar[int] = _LAYOUT.size

    def pack(self) -> bytes:
        """Return the request header's bytes."""
        return _pack(self._LAYOUT, self.type, self.reserved, self.sector)

    @classmethod
    def unpack(cls, data: bytes) -> BlkRequest:
        """Build the request header from exactly ``SIZE`` bytes."""
        return cls(*_unpack(cls._LAYOUT, data, "block request"))