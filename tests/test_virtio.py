import pytest

from xvtools.virtio import (
    NUM,
    VIRTIO_BLK_T_IN,
    VIRTIO_BLK_T_OUT,
    VRING_DESC_F_NEXT,
    VRING_DESC_F_WRITE,
    BlkRequest,
    MmioRegister,
    VirtqAvail,
    VirtqDesc,
    VirtqUsed,
    VirtqUsedElem,
)


@pytest.mark.parametrize(
    "desc",
    [
        VirtqDesc(),
        VirtqDesc(0x80001000, 1024, VRING_DESC_F_NEXT, 1),
        VirtqDesc(2**64 - 1, 2**32 - 1, VRING_DESC_F_NEXT | VRING_DESC_F_WRITE, NUM - 1),
    ],
)
def test_desc_round_trip(desc):
    data = desc.pack()
    assert len(data) == VirtqDesc.SIZE
    assert VirtqDesc.unpack(data) == desc


def test_desc_size_matches_spec():
    assert len(VirtqDesc().pack()) == 16


def test_desc_layout_is_little_endian():
    desc = VirtqDesc(0x1122334455667788, 512, VRING_DESC_F_WRITE, 2)
    data = desc.pack()
    assert data[:8] == desc.addr.to_bytes(8, "little")
    assert data[8:12] == desc.length.to_bytes(4, "little")
    assert data[12:14] == VRING_DESC_F_WRITE.to_bytes(2, "little")
    assert data[14:16] == desc.next.to_bytes(2, "little")


def test_desc_unpack_wrong_length():
    with pytest.raises(ValueError):
        VirtqDesc.unpack(b"\0" * (VirtqDesc.SIZE - 1))


def test_desc_value_too_large():
    with pytest.raises(ValueError):
        VirtqDesc(addr=1 << 64).pack()


def test_avail_round_trip():
    avail = VirtqAvail(0, 3, [0, 3, 6, 0, 0, 0, 0, 7], 0)
    assert VirtqAvail.unpack(avail.pack()) == avail


def test_avail_ring_positions():
    avail = VirtqAvail(idx=1, ring=[5] + [0] * (NUM - 1))
    data = avail.pack()
    assert len(data) == VirtqAvail.SIZE
    assert data[2:4] == (1).to_bytes(2, "little")
    assert data[4:6] == (5).to_bytes(2, "little")


def test_avail_wrong_ring_length():
    with pytest.raises(ValueError):
        VirtqAvail(ring=[0] * (NUM + 1)).pack()


def test_used_round_trip():
    ring = [VirtqUsedElem(i, i * 100) for i in range(NUM)]
    used = VirtqUsed(0, 4, ring)
    data = used.pack()
    assert len(data) == VirtqUsed.SIZE
    assert VirtqUsed.unpack(data) == used


def test_used_size_is_head_plus_elements():
    assert len(VirtqUsed().pack()) == 4 + NUM * VirtqUsedElem.SIZE


def test_used_default_elements_are_distinct():
    used = VirtqUsed()
    used.ring[0].id = 3
    assert used.ring[1].id == 0


def test_used_unpack_wrong_length():
    with pytest.raises(ValueError):
        VirtqUsed.unpack(b"\0" * (VirtqUsed.SIZE + 1))


def test_used_elem_round_trip():
    elem = VirtqUsedElem(7, 1024)
    assert VirtqUsedElem.unpack(elem.pack()) == elem


@pytest.mark.parametrize("kind", [VIRTIO_BLK_T_IN, VIRTIO_BLK_T_OUT])
def test_blk_request_round_trip(kind):
    req = BlkRequest(kind, 0, 1234)
    data = req.pack()
    assert data[:4] == kind.to_bytes(4, "little")
    assert data[8:] == (1234).to_bytes(8, "little")
    assert BlkRequest.unpack(data) == req


def test_blk_request_unpack_wrong_length():
    with pytest.raises(ValueError):
        BlkRequest.unpack(b"")


def test_register_lookup_by_offset():
    assert MmioRegister(MmioRegister.STATUS.value) is MmioRegister.STATUS
    assert MmioRegister.QUEUE_DESC_HIGH - MmioRegister.QUEUE_DESC_LOW == 4