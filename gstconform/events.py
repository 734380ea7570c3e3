# GStreamer conformance tests
#
#       events.py
#
# Copyright (c) 2026, gst-conformance contributors
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 2.1 of the License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this program; if not, write to the
# Free Software Foundation, Inc., 59 Temple Place - Suite 330,
# Boston, MA 02111-1307, USA.

"""
Stream traffic and notifications observed on the graph under test

All times are in nanoseconds, None meaning 'not set'.
"""

from collections import namedtuple

# Unit of data flowing through an endpoint
Buffer = namedtuple("Buffer", ["timestamp", "duration", "offset", "offset_end",
                               "is_keyframe", "size"])
Buffer.__new__.__defaults__ = (None, None, None, None, True, 0)

class SeekFlags:
    NONE = 0
    FLUSH = 1 << 0
    ACCURATE = 1 << 1
    KEY_UNIT = 1 << 2
    SEGMENT = 1 << 3


class Segment:
    """
    Time range and rate currently delivered on an endpoint
    """

    def __init__(self, rate=1.0, applied_rate=1.0, start=0, stop=None,
                 time=0, position=None, format="time"):
        self.rate = rate
        self.applied_rate = applied_rate
        self.start = start
        self.stop = stop
        self.time = time
        self.position = position
        if self.position is None:
            self.position = start
        self.format = format

    def effective_rate(self):
        return self.rate * self.applied_rate

    def to_stream_time(self, position):
        """
        Translates a buffer timestamp into stream time, the way
        gst_segment_to_stream_time() does.

        Returns None if position is outside of the segment.
        """
        if position is None or self.time is None:
            return None
        if self.stop is not None and position > self.stop:
            return None
        if position < self.start:
            return None
        position -= self.start
        abs_applied_rate = abs(self.applied_rate)
        if abs_applied_rate != 1.0:
            position = int(position * abs_applied_rate)
        if self.applied_rate > 0:
            return position + self.time
        if self.time > position:
            return self.time - position
        return 0

    def clip(self, start, stop):
        """
        Returns False if [start, stop] is completely outside of the segment.

        Only time segments are checked, anything else is never clipped.
        """
        if self.format != "time":
            return True
        if (self.stop is not None and start is not None
            and (start > self.stop
                 or (self.start != self.stop and start == self.stop))):
            return False
        if (stop is not None
            and (stop < self.start
                 or (start != stop and stop == self.start))):
            return False
        return True

    def __eq__(self, other):
        if not isinstance(other, Segment):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __repr__(self):
        return "<Segment rate:%r applied-rate:%r start:%r stop:%r time:%r>" % (
            self.rate, self.applied_rate, self.start, self.stop, self.time)


class ControlEvent(namedtuple("ControlEvent", ["kind", "seqnum", "segment",
                                               "tags", "name"])):
    """
    In-band event flowing through an endpoint
    """

    SEGMENT = "segment"
    TAG = "tag"
    OTHER = "other"

    @classmethod
    def new_segment(cls, segment, seqnum=0):
        return cls(cls.SEGMENT, seqnum, segment, None, "segment")

    @classmethod
    def new_tag(cls, tags, seqnum=0):
        return cls(cls.TAG, seqnum, None, tags, "tag")

    @classmethod
    def new_other(cls, name, seqnum=0):
        return cls(cls.OTHER, seqnum, None, None, name)


## Notifications delivered to the conformance state machine

# traffic seen by a probe installed on endpoint
BufferObserved = namedtuple("BufferObserved", ["endpoint", "buffer"])
ControlEventObserved = namedtuple("ControlEventObserved", ["endpoint", "event"])
# a new element or endpoint appeared in the graph
ChildAdded = namedtuple("ChildAdded", ["container", "child"])
# graph-wide notifications
StateReached = namedtuple("StateReached", ["state"])
ErrorRaised = namedtuple("ErrorRaised", ["source", "message", "debug"])
EndOfStream = namedtuple("EndOfStream", [])
SegmentDone = namedtuple("SegmentDone", ["position"])
