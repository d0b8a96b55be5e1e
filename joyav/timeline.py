"""Maps durations of re-encoded audio back onto input timestamps."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import timedelta

_ZERO = timedelta(0)


@dataclass
class _Segment:
    tm: timedelta
    dur: timedelta


class Timeline:
    """Time segments pushed at the tail and consumed from the head."""

    def __init__(self) -> None:
        self._segs: deque[_Segment] = deque()
        self.head_time = _ZERO

    def push(self, tm: timedelta, dur: timedelta) -> None:
        """Add a segment; one overlapping the previous is moved to its end."""
        if self._segs:
            tail = self._segs[-1]
            end = tail.tm + tail.dur
            if tm < end:
                tm = end
        self._segs.append(_Segment(tm, dur))

    def pop(self, dur: timedelta) -> timedelta:
        """Consume dur from the head; return the time where it started."""
        if not self._segs:
            return self.head_time
        tm = self._segs[0].tm
        while dur > _ZERO and self._segs:
            seg = self._segs[0]
            sub = min(dur, seg.dur)
            seg.dur -= sub
            dur -= sub
            seg.tm += sub
            self.head_time += sub
            if seg.dur == _ZERO:
                self._segs.popleft()
        return tm