# GStreamer conformance tests
#
#       test_gstgraph.py
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

import time

from common import unittest, TestCase

from gstconform.events import Buffer, ControlEvent, ErrorRaised, EndOfStream
from gstconform.observer import StreamObserver, EndpointSelector
from gstconform.graph import Endpoint
from gstconform.utils import SECOND

try:
    import gi
    gi.require_version("Gst", "1.0")
    gi.require_version("GstPbutils", "1.0")
    from gi.repository import GLib, Gst
    Gst.init(None)
    HAVE_GST = all(Gst.ElementFactory.find(name) is not None
                   for name in ["audiotestsrc", "audioconvert", "fakesink"])
except (ImportError, ValueError):
    HAVE_GST = False

@unittest.skipUnless(HAVE_GST, "GStreamer is not available")
class ConversionTest(TestCase):

    def testBuffer(self):
        from gstconform.gstgraph import buffer_from_gst
        gstbuffer = Gst.Buffer.new_wrapped(b"abcd")
        gstbuffer.pts = SECOND
        gstbuffer.set_flags(Gst.BufferFlags.DELTA_UNIT)
        buf = buffer_from_gst(gstbuffer)
        self.assertEqual(buf.timestamp, SECOND)
        self.assertEqual(buf.duration, None)
        self.assertEqual(buf.offset, None)
        self.assertEqual(buf.size, 4)
        self.assertFalse(buf.is_keyframe)

    def testSegmentEvent(self):
        from gstconform.gstgraph import event_from_gst
        segment = Gst.Segment()
        segment.init(Gst.Format.TIME)
        event = Gst.Event.new_segment(segment)
        event.set_seqnum(42)
        res = event_from_gst(event)
        self.assertEqual(res.kind, ControlEvent.SEGMENT)
        self.assertEqual(res.seqnum, 42)
        self.assertEqual(res.segment.rate, 1.0)
        self.assertEqual(res.segment.start, 0)
        self.assertEqual(res.segment.stop, None)

    def testTagEvent(self):
        from gstconform.gstgraph import event_from_gst
        taglist = Gst.TagList.new_empty()
        taglist.add_value(Gst.TagMergeMode.APPEND, Gst.TAG_TITLE, "foo")
        res = event_from_gst(Gst.Event.new_tag(taglist))
        self.assertEqual(res.kind, ControlEvent.TAG)
        self.assertEqual(res.tags.get_value("title"), "foo")

    def testOtherEvent(self):
        from gstconform.gstgraph import event_from_gst
        res = event_from_gst(Gst.Event.new_eos())
        self.assertEqual(res.kind, ControlEvent.OTHER)
        self.assertEqual(res.name, "eos")


@unittest.skipUnless(HAVE_GST, "GStreamer is not available")
class GraphTest(TestCase):

    def setUp(self):
        from gstconform.gstgraph import GstGraph
        self.pipeline = Gst.parse_launch("audiotestsrc name=src num-buffers=5 "
                                         "! audioconvert name=conv "
                                         "! fakesink name=sink")
        self.graph = GstGraph(self.pipeline)
        self.notifications = []
        self.graph.set_notify_function(self.notifications.append)
        self.items = []

    def tearDown(self):
        self.graph.shutdown()

    def _itemCb(self, endpoint, item):
        # streaming thread
        self.items.append((endpoint, item))
        return True

    def iterateUntil(self, predicate, timeout=5.0):
        context = GLib.MainContext.default()
        deadline = time.monotonic() + timeout
        while not predicate() and time.monotonic() < deadline:
            if not context.iteration(False):
                time.sleep(0.01)
        return predicate()

    def gotNotification(self, klass):
        return any(isinstance(n, klass) for n in self.notifications)

    def testWalk(self):
        root = self.graph.get_root()
        self.assertTrue(root.is_container())
        names = sorted(child.name for child in root.children())
        self.assertEqual(names, ["conv", "sink", "src"])
        conv = [child for child in root.children() if child.name == "conv"][0]
        self.assertTrue("Converter" in conv.klass)
        self.assertFalse(conv.is_container())
        # wrappers are cached
        self.assertTrue(root.children()[0] is root.children()[0])

    def testObserve(self):
        observer = StreamObserver.attach(self.graph.get_root(),
                                         EndpointSelector(element="conv",
                                                          direction=Endpoint.SRC),
                                         self._itemCb)
        self.assertEqual([e.name for e in observer.get_endpoints()], ["src"])
        self.assertTrue(self.graph.play())
        self.assertTrue(self.iterateUntil(lambda: self.gotNotification(EndOfStream)))
        observer.detach()

        buffers = [item for endpoint, item in self.items if isinstance(item, Buffer)]
        events = [item for endpoint, item in self.items if isinstance(item, ControlEvent)]
        self.assertEqual(len(buffers), 5)
        self.assertTrue(ControlEvent.SEGMENT in [e.kind for e in events])
        caps = self.items[0][0].get_media_type()
        self.assertEqual(caps.structures[0].name, "audio/x-raw")

    def testQueries(self):
        self.pipeline.set_state(Gst.State.PAUSED)
        self.pipeline.get_state(5 * Gst.SECOND)
        self.assertEqual(self.graph.query_position(), 0)
        self.assertTrue(self.graph.query_seekable() in (True, False, None))

    def testUnlink(self):
        self.pipeline.get_by_name("src").set_property("num-buffers", -1)
        self.pipeline.get_by_name("sink").set_property("sync", True)
        observer = StreamObserver.attach(self.graph.get_root(),
                                         EndpointSelector(element="conv",
                                                          direction=Endpoint.SRC),
                                         self._itemCb)
        self.assertTrue(self.graph.play())
        self.assertTrue(self.iterateUntil(lambda: len(self.items) > 0))
        self.assertTrue(self.graph.unlink(observer.get_endpoints()[0]))
        self.assertTrue(self.iterateUntil(lambda: self.gotNotification(ErrorRaised)))
        observer.detach()

    def testUnlinkSinkEndpoint(self):
        self.pipeline.get_by_name("src").set_property("num-buffers", -1)
        self.pipeline.get_by_name("sink").set_property("sync", True)
        observer = StreamObserver.attach(self.graph.get_root(),
                                         EndpointSelector(element="sink",
                                                          direction=Endpoint.SINK),
                                         self._itemCb)
        self.assertEqual([e.name for e in observer.get_endpoints()], ["sink"])
        self.assertTrue(self.graph.play())
        self.assertTrue(self.iterateUntil(lambda: len(self.items) > 0))
        sinkpad = self.pipeline.get_by_name("sink").get_static_pad("sink")
        self.assertTrue(self.graph.unlink(observer.get_endpoints()[0]))
        self.assertTrue(self.iterateUntil(lambda: not sinkpad.is_linked()))
        observer.detach()


if __name__ == "__main__":
    unittest.main()
