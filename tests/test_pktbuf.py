import pytest

from joyav.av import Packet
from joyav.pktbuf import Buf


def _pkts(n):
    return [Packet(idx=i % 2, data=bytes(i % 7)) for i in range(n)]


def test_fifo_order_and_size():
    buf = Buf()
    pkts = _pkts(5)
    for p in pkts:
        buf.push(p)
    assert buf.count == 5
    assert buf.size == sum(len(p.data) for p in pkts)
    assert [buf.pop() for _ in range(5)] == pkts
    assert buf.size == 0
    assert buf.count == 0


def test_grows_past_initial_capacity():
    buf = Buf()
    pkts = _pkts(200)
    for p in pkts:
        buf.push(p)
    assert len(buf) == 200
    assert [buf.pop() for _ in range(200)] == pkts


def test_pop_empty_raises():
    with pytest.raises(IndexError):
        Buf().pop()


def test_positions():
    buf = Buf()
    pkts = _pkts(4)
    for p in pkts:
        buf.push(p)
    buf.pop()
    assert buf.head == 1
    assert buf.tail == 4
    assert not buf.is_valid_pos(0)
    assert buf.is_valid_pos(1)
    assert buf.is_valid_pos(3)
    assert not buf.is_valid_pos(4)
    assert buf.get(2) is pkts[2]
    with pytest.raises(IndexError):
        buf.get(0)