# GStreamer conformance tests
#
#       test_descriptor.py
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
from gstconform.descriptor import Descriptor, Stream, Frame, Tag, TagGroup, \
     ParseError, serialize, deserialize, load, save, descriptor_path
from gstconform.utils import SECOND

def make_descriptor():
    d = Descriptor("file:///tmp/media.ogg", duration=10 * SECOND, seekable=True,
                   frame_detection=True)
    video = Stream(0, Caps.from_string("video/x-theora, width=(int)320, height=(int)240"),
                   "serial_1234")
    video.frames = [Frame(0, 0, 100, SECOND // 25, 0, True),
                    Frame(1, 100, 180, SECOND // 25, SECOND // 25, False),
                    Frame(2, None, None, None, None, False)]
    audio = Stream(1, Caps.from_string("audio/x-vorbis, rate=(int)44100, channels=(int)2"),
                   "serial_5678")
    audio.frames = [Frame(0, 0, 512, 11609977, 0, True)]
    d.streams = [video, audio]
    d.tag_groups = [TagGroup([Tag(Structure.from_string('taglist, title=(string)"A title"')),
                              Tag(Structure.from_string("taglist, bitrate=(uint)128000"))])]
    return d


class DescriptorPathTest(TestCase):

    def testNamingConvention(self):
        self.assertEqual(descriptor_path("/media/a.mkv"), "/media/a.mkv.xml")
        self.assertEqual(descriptor_path("/media/a.mkv", subtitles=True),
                         "/media/a.mkv.subs.xml")


class SerializationTest(TestCase):

    def testRoundTrip(self):
        d = make_descriptor()
        res = deserialize(serialize(d))
        self.assertEqual(res, d)
        self.assertEqual([s.id for s in res.streams], [0, 1])
        self.assertEqual(res.streams[0].frames[2].timestamp, None)
        self.assertEqual(res.streams[0].endpoint_name, "serial_1234")

    def testEmptyRoundTrip(self):
        d = Descriptor("", duration=None, seekable=False)
        self.assertEqual(deserialize(serialize(d)), d)

    def testNoLocationRoundTrip(self):
        d = Descriptor(None)
        self.assertEqual(d.location, "")
        self.assertEqual(deserialize(serialize(d)), d)

    def testOneElementPerLine(self):
        text = serialize(make_descriptor())
        lines = text.splitlines()
        self.assertTrue(lines[0].startswith("<file "))
        self.assertEqual(lines[-1], "</file>")
        self.assertEqual(len([l for l in lines if "<frame " in l]), 4)
        self.assertTrue('seekable="1"' in lines[0])

    def testTagGroupsAreUnordered(self):
        d = make_descriptor()
        other = deserialize(serialize(d))
        other.tag_groups[0].tags.reverse()
        self.assertEqual(other, d)

    def testUnknownAttributesIgnored(self):
        text = """<file duration="5" seekable="0" location="x" future="yes">
  <streams>
    <stream caps="audio/mpeg" id="0" padname="src_0" other="1">
      <frame id="1" timestamp="10" is-keyframe="0" whatever="z" />
      <frame id="0" timestamp="0" is-keyframe="1" />
      <comment />
    </stream>
  </streams>
  <unknown-element />
</file>
"""
        d = deserialize(text)
        self.assertEqual(d.duration, 5)
        self.assertFalse(d.seekable)
        frames = d.streams[0].frames
        # frames are sorted by id
        self.assertEqual([f.id for f in frames], [0, 1])
        self.assertEqual(frames[1].timestamp, 10)
        self.assertTrue(frames[0].is_keyframe)

    def testMissingRequiredAttribute(self):
        try:
            deserialize('<file duration="5"><streams /></file>')
        except ParseError as e:
            self.assertEqual(e.node, "file")
            self.assertEqual(e.field, "seekable")
        else:
            self.fail("missing seekable was accepted")

    def testMalformedNumber(self):
        text = """<file duration="5" seekable="1"><streams>
<stream caps="audio/mpeg" id="0"><frame id="zero" /></stream>
</streams></file>"""
        try:
            deserialize(text)
        except ParseError as e:
            self.assertEqual(e.node, "frame")
            self.assertEqual(e.field, "id")
        else:
            self.fail("malformed frame id was accepted")

    def testInvalidBoolean(self):
        self.assertRaises(ParseError, deserialize,
                          '<file duration="5" seekable="2"></file>')

    def testInvalidCaps(self):
        self.assertRaises(ParseError, deserialize,
                          '<file duration="5" seekable="1"><streams>'
                          '<stream caps="a, b=(int)[1" id="0" /></streams></file>')

    def testNotXml(self):
        self.assertRaises(ParseError, deserialize, "this is not a descriptor")
        self.assertRaises(ParseError, deserialize, "<streams />")


class FileTest(TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def testSaveLoad(self):
        path = os.path.join(self.tmpdir, "media.ogg.xml")
        d = make_descriptor()
        self.assertTrue(save(d, path))
        self.assertEqual(load(path), d)

    def testSaveUnwritable(self):
        path = os.path.join(self.tmpdir, "missing-directory", "media.ogg.xml")
        self.assertFalse(save(make_descriptor(), path))

    def testLoadMissing(self):
        self.assertRaises(ParseError, load, os.path.join(self.tmpdir, "nothing.xml"))


class DescriptorTest(TestCase):

    def testReadOnlyProperties(self):
        d = make_descriptor()
        self.assertRaises(AttributeError, setattr, d, "duration", 0)
        self.assertRaises(AttributeError, setattr, d, "seekable", False)

    def testGetFrames(self):
        d = make_descriptor()
        self.assertEqual(len(d.get_frames()), 4)
        self.assertEqual(len(d.get_frames(d.streams[0])), 3)
        frames = d.get_frames(key=lambda f: (f.offset is None, f.offset))
        self.assertEqual(frames[-1].offset, None)

    def testEndpointNames(self):
        self.assertEqual(make_descriptor().get_endpoint_names(),
                         ["serial_1234", "serial_5678"])


if __name__ == "__main__":
    unittest.main()
