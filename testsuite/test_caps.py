# GStreamer conformance tests
#
#       test_caps.py
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

from gstconform.caps import Caps, Structure, CapsParseError

class StructureTest(TestCase):

    def testParse(self):
        s = Structure.from_string('video/x-raw, width=(int)320, height=(int)240, format=(string)"I420"')
        self.assertEqual(s.name, "video/x-raw")
        self.assertEqual(s.field_names(), ["width", "height", "format"])
        self.assertEqual(s.get_value("width"), 320)
        self.assertEqual(s.get_value("format"), "I420")
        self.assertEqual(s.get_value("depth"), None)
        self.assertEqual(len(s), 3)

    def testFieldOrderDoesNotMatter(self):
        s1 = Structure.from_string("audio/x-raw, rate=(int)44100, channels=(int)2")
        s2 = Structure.from_string("audio/x-raw, channels=(int)2, rate=(int)44100")
        self.assertEqual(s1, s2)
        self.assertEqual(hash(s1), hash(s2))

    def testDifferentValues(self):
        s1 = Structure.from_string("audio/x-raw, rate=(int)44100")
        s2 = Structure.from_string("audio/x-raw, rate=(int)48000")
        self.assertNotEqual(s1, s2)

    def testQuotedSeparators(self):
        s = Structure.from_string('taglist, title=(string)"a, b; c=d"')
        self.assertEqual(s.get_value("title"), "a, b; c=d")
        self.assertEqual(Structure.from_string(s.to_string()), s)

    def testTagListString(self):
        # Gst.TagList.to_string() ends with a semicolon
        s = Structure.from_string("taglist, title=(string)foo;")
        self.assertEqual(s, Structure.from_string("taglist, title=(string)foo"))

    def testRemoveField(self):
        s = Structure.from_string('taglist, title=(string)foo, source-pad=(string)"video_0"')
        copy = s.copy()
        copy.remove_field("source-pad")
        self.assertFalse(copy.has_field("source-pad"))
        self.assertTrue(s.has_field("source-pad"))
        self.assertNotEqual(copy, s)

    def testInvalid(self):
        self.assertRaises(CapsParseError, Structure.from_string, "")
        self.assertRaises(CapsParseError, Structure.from_string, None)
        self.assertRaises(CapsParseError, Structure.from_string, 'name, field=(string)"unterminated')


class CapsTest(TestCase):

    def testSpecialCaps(self):
        self.assertTrue(Caps.from_string("ANY").is_any())
        self.assertTrue(Caps.from_string("EMPTY").is_empty())
        self.assertNotEqual(Caps.from_string("ANY"), Caps.from_string("EMPTY"))

    def testStructuresAreUnordered(self):
        c1 = Caps.from_string("video/x-h264; video/mpeg, mpegversion=(int)4")
        c2 = Caps.from_string("video/mpeg, mpegversion=(int)4; video/x-h264")
        self.assertEqual(c1, c2)

    def testEquivalentForms(self):
        # equal for GStreamer, whatever the way they are written
        pairs = [("audio/mpeg, layout=(string)interleaved",
                  'audio/mpeg, layout=(string)"interleaved"'),
                 ("video/x-raw, width=(int)320", "video/x-raw, width=320"),
                 ("video/x-raw, width=(int)320", "video/x-raw, width=(i)320")]
        for first, second in pairs:
            self.assertEqual(Caps.from_string(first), Caps.from_string(second))
            self.assertEqual(hash(Caps.from_string(first)),
                             hash(Caps.from_string(second)))

    def testDifferentTypes(self):
        self.assertNotEqual(Caps.from_string("video/x-raw, width=(int)320"),
                            Caps.from_string("video/x-raw, width=(string)320"))

    def testCanonicalForm(self):
        text = "video/x-raw, framerate=(fraction)25/1, format=(string){ I420, YV12 }; video/x-h264, stream-format=(string)avc"
        caps = Caps.from_string(text)
        self.assertEqual(Caps.from_string(caps.to_string()), caps)
        self.assertEqual(len(caps.structures), 2)
        self.assertEqual(caps.structures[1].name, "video/x-h264")

    def testInvalid(self):
        self.assertRaises(CapsParseError, Caps.from_string, "a, b=(int)[1")
        self.assertRaises(CapsParseError, Caps.from_string, None)


if __name__ == "__main__":
    unittest.main()
