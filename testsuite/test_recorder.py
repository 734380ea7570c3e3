# GStreamer conformance tests
#
#       test_recorder.py
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

import os
import shutil
import tempfile

from common import unittest, TestCase

from gstconform.caps import Caps, Structure
from gstconform.descriptor import load
from gstconform.events import Buffer
from gstconform.recorder import DescriptorRecorder
from gstconform.utils import SECOND

VIDEO = Caps.from_string("video/x-h264, stream-format=(string)avc")
AUDIO = Caps.from_string("audio/mpeg, mpegversion=(int)4")

class RecorderTest(TestCase):

    def setUp(self):
        self.recorder = DescriptorRecorder("/media/a.mp4", 60 * SECOND, True)

    def testNewDescriptor(self):
        d = self.recorder.descriptor
        self.assertEqual(d.location, "/media/a.mp4")
        self.assertEqual(d.duration, 60 * SECOND)
        self.assertTrue(d.seekable)
        self.assertFalse(d.frame_detection)

    def testAddStream(self):
        video = self.recorder.add_stream("video_0", VIDEO)
        audio = self.recorder.add_stream("audio_0", AUDIO)
        self.assertEqual((video.id, audio.id), (0, 1))
        self.assertEqual(video.endpoint_name, "video_0")
        # same endpoint, same stream
        self.assertTrue(self.recorder.add_stream("video_0", VIDEO) is video)
        self.assertEqual(len(self.recorder.descriptor.streams), 2)

    def testAddStreamReusesUnboundStream(self):
        first = object()
        second = object()
        stream = self.recorder.add_stream("video_0", VIDEO, first)
        self.recorder.unbind_all()
        self.assertFalse(stream.is_bound())
        # first fit on media type, whatever the name
        self.assertTrue(self.recorder.add_stream("video_1", VIDEO, second) is stream)
        self.assertTrue(stream.endpoint is second)
        # bound streams are not reused
        third = self.recorder.add_stream("video_2", VIDEO, object())
        self.assertEqual(third.id, 1)

    def testAddFrame(self):
        stream = self.recorder.add_stream("video_0", VIDEO)
        self.recorder.add_frame(stream, 0, 100, SECOND, 0, True)
        frame = self.recorder.add_buffer(stream, Buffer(timestamp=SECOND, duration=SECOND,
                                                        offset=100, offset_end=150,
                                                        is_keyframe=False))
        self.assertEqual([f.id for f in stream.frames], [0, 1])
        self.assertEqual(frame.offset_end, 150)
        self.assertFalse(frame.is_keyframe)
        self.assertTrue(self.recorder.descriptor.frame_detection)

    def testAddTagsIsIdempotent(self):
        tags = Structure.from_string('taglist, title=(string)"x", source-pad=(string)video_0')
        self.assertTrue(self.recorder.add_tags(tags))
        self.assertFalse(self.recorder.add_tags(tags))
        # source-pad is not part of the recorded tag
        other = Structure.from_string('taglist, title=(string)"x", source-pad=(string)audio_0')
        self.assertFalse(self.recorder.add_tags(other))
        recorded = list(self.recorder.descriptor.iter_tags())
        self.assertEqual(len(recorded), 1)
        self.assertFalse(recorded[0].payload.has_field("source-pad"))
        self.assertTrue(tags.has_field("source-pad"))

        self.assertTrue(self.recorder.add_tags(Structure.from_string("taglist, bitrate=(uint)1")))
        self.assertEqual(len(list(self.recorder.descriptor.iter_tags())), 2)


class RecorderWriteTest(TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def testWrite(self):
        recorder = DescriptorRecorder("/media/a.mp4", 60 * SECOND, False)
        stream = recorder.add_stream("video_0", VIDEO)
        recorder.add_frame(stream, None, None, SECOND, 0, True)
        path = os.path.join(self.tmpdir, "a.mp4.xml")
        self.assertTrue(recorder.write(path))
        self.assertEqual(load(path), recorder.descriptor)

    def testWriteFailure(self):
        recorder = DescriptorRecorder("/media/a.mp4", 60 * SECOND, False)
        self.assertFalse(recorder.write(os.path.join(self.tmpdir, "no", "such", "dir.xml")))


if __name__ == "__main__":
    unittest.main()
