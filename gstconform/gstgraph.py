# GStreamer conformance tests
#
#       gstgraph.py
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
GStreamer implementation of the graph interface

Requires PyGObject and GStreamer 1.0 introspection data.
"""

import os

import gi
gi.require_version("Gst", "1.0")
gi.require_version("GstPbutils", "1.0")
from gi.repository import GLib, Gst

Gst.init(None)

from gi.repository import GstPbutils

from gstconform.log import critical, error, warning, debug, info, exception
from gstconform.graph import Graph, GraphNode, Endpoint
from gstconform.caps import Caps, Structure, CapsParseError
from gstconform.utils import CLOCK_TIME_NONE
from gstconform.events import Buffer, Segment, ControlEvent, SeekFlags, \
     StateReached, ErrorRaised, EndOfStream, SegmentDone

DISCOVERER_TIMEOUT = 10 * Gst.SECOND

_SEEK_FLAGS = [(SeekFlags.FLUSH, Gst.SeekFlags.FLUSH),
               (SeekFlags.ACCURATE, Gst.SeekFlags.ACCURATE),
               (SeekFlags.KEY_UNIT, Gst.SeekFlags.KEY_UNIT),
               (SeekFlags.SEGMENT, Gst.SeekFlags.SEGMENT)]

def _nullable(value):
    if value is None or value == CLOCK_TIME_NONE or value < 0:
        return None
    return value

def caps_from_gst(gstcaps):
    if gstcaps is None:
        return None
    return Caps(gstcaps)

def tags_from_gst(taglist):
    try:
        return Structure.from_string(taglist.to_string())
    except CapsParseError as e:
        warning("Could not parse tags %s : %s", taglist.to_string(), e)
        return None

def segment_from_gst(gstsegment):
    return Segment(rate=gstsegment.rate,
                   applied_rate=gstsegment.applied_rate,
                   start=gstsegment.start,
                   stop=_nullable(gstsegment.stop),
                   time=_nullable(gstsegment.time),
                   position=_nullable(gstsegment.position),
                   format=Gst.Format.get_name(gstsegment.format))

def buffer_from_gst(gstbuffer):
    return Buffer(timestamp=_nullable(gstbuffer.pts),
                  duration=_nullable(gstbuffer.duration),
                  offset=_nullable(gstbuffer.offset),
                  offset_end=_nullable(gstbuffer.offset_end),
                  is_keyframe=not gstbuffer.has_flags(Gst.BufferFlags.DELTA_UNIT),
                  size=gstbuffer.get_size())

def event_from_gst(event):
    seqnum = event.get_seqnum()
    if event.type == Gst.EventType.SEGMENT:
        return ControlEvent.new_segment(segment_from_gst(event.parse_segment()),
                                        seqnum)
    if event.type == Gst.EventType.TAG:
        return ControlEvent.new_tag(tags_from_gst(event.parse_tag()), seqnum)
    return ControlEvent.new_other(Gst.EventType.get_name(event.type), seqnum)


class GstPadEndpoint(Endpoint):

    def __init__(self, pad):
        parent = pad.get_parent_element()
        if pad.get_direction() == Gst.PadDirection.SRC:
            direction = Endpoint.SRC
        else:
            direction = Endpoint.SINK
        Endpoint.__init__(self, pad.get_name(),
                          parent and parent.get_name() or None,
                          direction)
        self.pad = pad

    def get_media_type(self):
        return caps_from_gst(self.pad.get_current_caps())

    def add_probe(self, callback):
        return self.pad.add_probe(Gst.PadProbeType.BUFFER
                                  | Gst.PadProbeType.EVENT_DOWNSTREAM,
                                  self._probeCb, callback)

    def _probeCb(self, pad, probeinfo, callback):
        if probeinfo.type & Gst.PadProbeType.BUFFER:
            item = buffer_from_gst(probeinfo.get_buffer())
        else:
            item = event_from_gst(probeinfo.get_event())
        if callback(self, item) == False:
            return Gst.PadProbeReturn.DROP
        return Gst.PadProbeReturn.OK

    def remove_probe(self, probeid):
        self.pad.remove_probe(probeid)


class GstElementNode(GraphNode):

    def __init__(self, graph, element):
        klass = ""
        factory = element.get_factory()
        if factory is not None:
            klass = factory.get_metadata("klass") or ""
        GraphNode.__init__(self, element.get_name(), klass)
        self.graph = graph
        self.element = element

    def is_container(self):
        return isinstance(self.element, Gst.Bin)

    def children(self):
        if not self.is_container():
            return []
        return [self.graph.wrap_element(elt)
                for elt in self.element.iterate_elements()]

    def endpoints(self):
        return [self.graph.wrap_pad(pad) for pad in self.element.iterate_pads()]

    def connect_child_added(self, callback):
        return self.element.connect("element-added", self._childAddedCb, callback)

    def _childAddedCb(self, element, child, callback):
        callback(self, self.graph.wrap_element(child))

    def connect_endpoint_added(self, callback):
        return self.element.connect("pad-added", self._padAddedCb, callback)

    def _padAddedCb(self, element, pad, callback):
        callback(self, self.graph.wrap_pad(pad))

    def disconnect(self, handlerid):
        self.element.disconnect(handlerid)


class GstGraph(Graph):
    """
    Graph on top of a Gst.Pipeline
    """

    def __init__(self, pipeline, uri=None):
        Graph.__init__(self, pipeline.get_name())
        self.pipeline = pipeline
        self.uri = uri
        self._wrappers = {}
        self.bus = pipeline.get_bus()
        self.bus.add_signal_watch()
        self._busid = self.bus.connect("message", self._busMessageHandlerCb)

    @classmethod
    def from_location(cls, location):
        """
        Returns a GstGraph decoding location with uridecodebin, every
        stream going to a fakesink.
        """
        if Gst.uri_is_valid(location):
            uri = location
        else:
            uri = Gst.filename_to_uri(os.path.abspath(location))
        pipeline = Gst.Pipeline.new("conformance-pipeline")
        dbin = Gst.ElementFactory.make("uridecodebin", "dbin")
        if dbin is None:
            raise RuntimeError("uridecodebin is not available")
        dbin.set_property("uri", uri)
        pipeline.add(dbin)
        dbin.connect("pad-added", cls._decodedPadAddedCb, pipeline)
        return cls(pipeline, uri)

    @staticmethod
    def _decodedPadAddedCb(dbin, pad, pipeline):
        sink = Gst.ElementFactory.make("fakesink", None)
        sink.set_property("sync", True)
        pipeline.add(sink)
        sink.sync_state_with_parent()
        res = pad.link(sink.get_static_pad("sink"))
        if res != Gst.PadLinkReturn.OK:
            warning("Could not link %s : %s", pad.get_name(), res)

    def wrap_element(self, element):
        res = self._wrappers.get(element)
        if res is None:
            res = GstElementNode(self, element)
            self._wrappers[element] = res
        return res

    def wrap_pad(self, pad):
        res = self._wrappers.get(pad)
        if res is None:
            res = GstPadEndpoint(pad)
            self._wrappers[pad] = res
        return res

    def get_root(self):
        return self.wrap_element(self.pipeline)

    def _busMessageHandlerCb(self, bus, message):
        if message.type == Gst.MessageType.ERROR:
            gerror, dbg = message.parse_error()
            self.notify(ErrorRaised(message.src.get_name(), gerror.message, dbg))
        elif message.type == Gst.MessageType.EOS:
            self.notify(EndOfStream())
        elif message.type == Gst.MessageType.SEGMENT_DONE:
            fmt, position = message.parse_segment_done()
            self.notify(SegmentDone(position))
        elif (message.type == Gst.MessageType.STATE_CHANGED
              and message.src == self.pipeline):
            prev, cur, pending = message.parse_state_changed()
            if pending == Gst.State.VOID_PENDING:
                self.notify(StateReached(Gst.Element.state_get_name(cur)))
        return True

    def play(self):
        res = self.pipeline.set_state(Gst.State.PLAYING)
        debug("set_state returned %r", res)
        return res != Gst.StateChangeReturn.FAILURE

    def shutdown(self):
        self.pipeline.set_state(Gst.State.NULL)
        if self._busid:
            self.bus.disconnect(self._busid)
            self.bus.remove_signal_watch()
            self._busid = 0

    def restart(self):
        return self.pipeline.seek_simple(Gst.Format.TIME, Gst.SeekFlags.FLUSH, 0)

    def discover(self):
        discoverer = GstPbutils.Discoverer.new(DISCOVERER_TIMEOUT)
        try:
            dinfo = discoverer.discover_uri(self.uri)
        except GLib.Error as e:
            warning("Could not discover %s : %s", self.uri, e.message)
            return None
        return (_nullable(dinfo.get_duration()), dinfo.get_seekable())

    def query_seekable(self):
        query = Gst.Query.new_seeking(Gst.Format.TIME)
        if not self.pipeline.query(query):
            return None
        fmt, seekable, start, end = query.parse_seeking()
        return seekable

    def query_duration(self):
        res, duration = self.pipeline.query_duration(Gst.Format.TIME)
        if not res:
            return None
        return _nullable(duration)

    def query_position(self):
        res, position = self.pipeline.query_position(Gst.Format.TIME)
        if not res:
            return None
        return _nullable(position)

    def send_seek(self, rate, start, stop, flags, seqnum):
        gstflags = Gst.SeekFlags.NONE
        for flag, gstflag in _SEEK_FLAGS:
            if flags & flag:
                gstflags |= gstflag
        if stop is None:
            stop_type, stop = Gst.SeekType.NONE, -1
        else:
            stop_type = Gst.SeekType.SET
        event = Gst.Event.new_seek(rate, Gst.Format.TIME, gstflags,
                                   Gst.SeekType.SET, start, stop_type, stop)
        event.set_seqnum(seqnum)
        return self.pipeline.send_event(event)

    def unlink(self, endpoint):
        pad = endpoint.pad
        peer = pad.get_peer()
        if peer is None:
            warning("%r is not linked", endpoint)
            return False
        if pad.get_direction() == Gst.PadDirection.SRC:
            src, sink = pad, peer
        else:
            src, sink = peer, pad
        # blocks the upstream side so no buffer is in flight while unlinking
        src.add_probe(Gst.PadProbeType.IDLE, self._unlinkProbeCb, sink)
        return True

    @staticmethod
    def _unlinkProbeCb(src, probeinfo, sink):
        debug("Unlinking %s from %s", src.get_name(), sink.get_name())
        src.unlink(sink)
        return Gst.PadProbeReturn.REMOVE
