# GStreamer conformance tests
#
#       test_events.py
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

from common import unittest, TestCase

from gstconform.events import Buffer, Segment, ControlEvent
from gstconform.utils import SECOND, time_to_string, seconds_to_string

class SegmentTest(TestCase):

    def testStreamTime(self):
        segment = Segment(rate=2.0, start=10 * SECOND, time=10 * SECOND)
        self.assertEqual(segment.to_stream_time(12 * SECOND), 12 * SECOND)
        self.assertEqual(segment.to_stream_time(5 * SECOND), None)
        segment = Segment(start=SECOND, stop=5 * SECOND, time=0)
        self.assertEqual(segment.to_stream_time(3 * SECOND), 2 * SECOND)
        self.assertEqual(segment.to_stream_time(6 * SECOND), None)

    def testStreamTimeAppliedRate(self):
        segment = Segment(applied_rate=-1.0, start=0, time=10 * SECOND)
        self.assertEqual(segment.to_stream_time(4 * SECOND), 6 * SECOND)
        self.assertEqual(segment.to_stream_time(12 * SECOND), 0)
        self.assertEqual(Segment(rate=2.0, applied_rate=0.5).effective_rate(), 1.0)

    def testClip(self):
        segment = Segment(start=10, stop=20)
        self.assertTrue(segment.clip(12, 14))
        self.assertTrue(segment.clip(5, 12))
        self.assertTrue(segment.clip(18, 25))
        self.assertFalse(segment.clip(21, 25))
        self.assertFalse(segment.clip(2, 8))
        # touching the boundaries only
        self.assertFalse(segment.clip(20, 25))
        self.assertFalse(segment.clip(5, 10))
        self.assertTrue(Segment(start=10).clip(1000, 1010))

    def testClipEmptyBuffer(self):
        segment = Segment(start=10, stop=20)
        self.assertTrue(segment.clip(10, 10))
        self.assertFalse(segment.clip(21, 21))

    def testClipOtherFormats(self):
        # byte offsets are not comparable with timestamps
        segment = Segment(start=0, stop=100, format="bytes")
        self.assertTrue(segment.clip(500, 600))
        self.assertFalse(Segment(start=0, stop=100).clip(500, 600))


class ControlEventTest(TestCase):

    def testConstructors(self):
        segment = Segment()
        event = ControlEvent.new_segment(segment, 12)
        self.assertEqual((event.kind, event.seqnum), (ControlEvent.SEGMENT, 12))
        self.assertTrue(event.segment is segment)
        self.assertEqual(ControlEvent.new_other("eos").name, "eos")
        self.assertEqual(ControlEvent.new_tag(None).kind, ControlEvent.TAG)

    def testBufferDefaults(self):
        buf = Buffer(timestamp=0)
        self.assertTrue(buf.is_keyframe)
        self.assertEqual(buf.duration, None)


class TimeFormatTest(TestCase):

    def testTimeToString(self):
        self.assertEqual(time_to_string(SECOND), "0:00:01.000000000")
        self.assertEqual(time_to_string(3723 * SECOND + 5), "1:02:03.000000005")
        self.assertEqual(time_to_string(None), "CLOCK_TIME_NONE")
        self.assertEqual(time_to_string(-SECOND), "-0:00:01.000000000")

    def testSecondsToString(self):
        self.assertEqual(seconds_to_string(10 * SECOND), "10s")
        self.assertEqual(seconds_to_string(10 * SECOND + SECOND // 2), "10.5s")
        self.assertEqual(seconds_to_string(None), "none")


if __name__ == "__main__":
    unittest.main()
