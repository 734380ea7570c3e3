# GStreamer conformance tests
#
#       common.py
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
Helpers for the gstconform testsuite
"""

import unittest
from unittest import TestCase

from gstconform.caps import Caps
from gstconform.checklist import Reporter
from gstconform.graph import Graph, GraphNode, Endpoint
from gstconform.events import Buffer, Segment, ControlEvent
from gstconform.utils import SECOND, MSECOND

class FakeLoop:
    """
    Deterministic replacement for the GLib main loop API. Time only moves
    forward when advance() is called.
    """

    def __init__(self):
        self.now = 0
        self._sources = {}
        self._nextid = 1

    def time(self):
        return self.now / 1000.0

    def _add(self, interval, idle, callback, args):
        sourceid = self._nextid
        self._nextid += 1
        self._sources[sourceid] = [self.now + interval, interval, idle,
                                   callback, args]
        return sourceid

    def timeout_add(self, interval, callback, *args):
        return self._add(interval, False, callback, args)

    def idle_add(self, callback, *args):
        return self._add(0, True, callback, args)

    def source_remove(self, sourceid):
        return self._sources.pop(sourceid, None) is not None

    def _dispatch(self, sourceid):
        source = self._sources[sourceid]
        if source[3](*source[4]):
            # the callback might have removed it
            if sourceid in self._sources:
                source[0] += source[1]
        else:
            self._sources.pop(sourceid, None)

    def run_idle(self):
        for i in range(10000):
            idles = sorted(sourceid for sourceid, source in self._sources.items()
                           if source[2])
            if not idles:
                return
            self._dispatch(idles[0])
        raise RuntimeError("idle sources keep coming back")

    def advance(self, milliseconds):
        target = self.now + milliseconds
        self.run_idle()
        while True:
            due = [(source[0], sourceid) for sourceid, source in self._sources.items()
                   if not source[2] and source[0] <= target]
            if not due:
                break
            self.now, sourceid = min(due)
            self._dispatch(sourceid)
            self.run_idle()
        self.now = target

    def pending_timeouts(self):
        return len([s for s in self._sources.values() if not s[2]])


class RecordingReporter(Reporter):

    def __init__(self):
        self.results = {}
        self.extra = {}
        self.validated = []
        self.done_called = 0
        self.pings = 0

    def validate(self, name, passed, message=None):
        self.validated.append(name)
        self.results[name] = (passed, message)

    def extra_info(self, key, value):
        self.extra[key] = value

    def done(self):
        self.done_called += 1

    def ping(self):
        self.pings += 1


class FakeEndpoint(Endpoint):

    def __init__(self, name, caps="video/x-raw, format=(string)I420",
                 element_name=None, direction=Endpoint.SRC):
        Endpoint.__init__(self, name, element_name, direction)
        if caps is None:
            self.caps = None
        else:
            self.caps = Caps.from_string(caps)
        self.probes = {}
        self._nextid = 1

    def get_media_type(self):
        return self.caps

    def add_probe(self, callback):
        probeid = self._nextid
        self._nextid += 1
        self.probes[probeid] = callback
        return probeid

    def remove_probe(self, probeid):
        del self.probes[probeid]

    def push(self, item):
        res = True
        for callback in list(self.probes.values()):
            if callback(self, item) == False:
                res = False
        return res

    def push_segment(self, rate=1.0, start=0, stop=None, time=None, seqnum=0):
        if time is None:
            time = start
        return self.push(ControlEvent.new_segment(
            Segment(rate=rate, start=start, stop=stop, time=time), seqnum))

    def push_buffer(self, timestamp, duration=40 * MSECOND, **kwargs):
        return self.push(Buffer(timestamp=timestamp, duration=duration, **kwargs))


class FakeNode(GraphNode):

    def __init__(self, name, children=None, endpoints=None, klass="",
                 container=False):
        GraphNode.__init__(self, name, klass)
        self._children = list(children or [])
        self._endpoints = list(endpoints or [])
        for endpoint in self._endpoints:
            endpoint.element_name = name
        self._container = container or bool(children)
        self._handlers = {}
        self._nextid = 1

    def is_container(self):
        return self._container

    def children(self):
        return list(self._children)

    def endpoints(self):
        return list(self._endpoints)

    def _connect(self, signal, callback):
        handlerid = self._nextid
        self._nextid += 1
        self._handlers[handlerid] = (signal, callback)
        return handlerid

    def connect_child_added(self, callback):
        return self._connect("child-added", callback)

    def connect_endpoint_added(self, callback):
        return self._connect("endpoint-added", callback)

    def disconnect(self, handlerid):
        del self._handlers[handlerid]

    def handler_count(self):
        return len(self._handlers)

    def _emit(self, signal, arg):
        for name, callback in list(self._handlers.values()):
            if name == signal:
                callback(self, arg)

    def add_child(self, child):
        self._children.append(child)
        self._emit("child-added", child)

    def add_endpoint(self, endpoint):
        endpoint.element_name = self.name
        self._endpoints.append(endpoint)
        self._emit("endpoint-added", endpoint)


class FakeGraph(Graph):
    """
    Graph answering queries with the values it was given and recording
    what is asked from it
    """

    def __init__(self, root=None, seekable=True, duration=30 * SECOND,
                 discovered=None):
        Graph.__init__(self, "fake-graph")
        self.root = root or FakeNode("pipeline", container=True)
        self.seekable = seekable
        self.duration = duration
        self.position = None
        self.discovered = discovered
        self.seek_result = True
        self.play_result = True
        self.seeks = []
        self.unlinked = []
        self.played = 0
        self.restarted = 0
        self.is_shutdown = False

    def get_root(self):
        return self.root

    def play(self):
        self.played += 1
        return self.play_result

    def shutdown(self):
        self.is_shutdown = True

    def restart(self):
        self.restarted += 1
        return True

    def discover(self):
        return self.discovered

    def query_seekable(self):
        return self.seekable

    def query_duration(self):
        return self.duration

    def query_position(self):
        return self.position

    def send_seek(self, rate, start, stop, flags, seqnum):
        self.seeks.append((rate, start, stop, flags, seqnum))
        return self.seek_result

    def unlink(self, endpoint):
        self.unlinked.append(endpoint)
        return True


def create_test(testclass, graph, **arguments):
    """
    Returns (test, loop, reporter) for a testclass instance running on
    graph with a FakeLoop
    """
    loop = FakeLoop()
    reporter = RecordingReporter()

    class _FakeGraphTest(testclass):

        def createGraph(self):
            return graph

    test = _FakeGraphTest(reporter=reporter, loop=loop, clock=loop.time,
                          **arguments)
    return test, loop, reporter
