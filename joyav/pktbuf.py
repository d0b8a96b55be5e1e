"""A FIFO of packets addressed by ever-increasing positions."""

from __future__ import annotations

from collections import deque

from .av import Packet


class Buf:
    """Packets from position head (oldest) up to, not including, tail."""

    def __init__(self) -> None:
        self._pkts: deque[Packet] = deque()
        self.head = 0
        self.size = 0

    @property
    def count(self) -> int:
        return len(self._pkts)

    @property
    def tail(self) -> int:
        return self.head + len(self._pkts)

    def __len__(self) -> int:
        return len(self._pkts)

    def pop(self) -> Packet:
        """Remove and return the oldest packet."""
        if not self._pkts:
            raise IndexError("pktque.Buf: pop() when count == 0")
        pkt = self._pkts.popleft()
        self.size -= len(pkt.data)
        self.head += 1
        return pkt

    def push(self, pkt: Packet) -> None:
        """Append a packet at position tail."""
        self._pkts.append(pkt)
        self.size += len(pkt.data)

    def get(self, pos: int) -> Packet:
        """The packet at an absolute position."""
        if not self.is_valid_pos(pos):
            raise IndexError(f"pktque.Buf: position {pos} not buffered")
        return self._pkts[pos - self.head]

    def is_valid_pos(self, pos: int) -> bool:
        return self.head <= pos < self.tail