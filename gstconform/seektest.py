# GStreamer conformance tests
#
#       seektest.py
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
Seek conformance tests

A SeekModeTest plays a media file through the graph under test and checks
that it answers queries, seeks in all the trick-play modes, survives an
endpoint being unlinked and produces the streams, frames and tags recorded
in the media descriptor of the file.

If there is no media descriptor yet, it can be generated by playing the
file once before testing.

Phases, in that order:
  (DESCRIPTOR_GENERATION)
  NONE : waiting for the first buffer
  QUERIES : seekability and duration queries
  POSITION : position query after some playback
  BACKWARD_PLAYBACK : seek at rate -1
  SEGMENT_SEEK : segment seek at rate 1 (only if enabled)
  FAST_FORWARD : seek at rate 2
  FAST_BACKWARD : seek at rate -2
  UNLINK_PAD : unlink one endpoint
  DONE
"""

import os
import threading
from collections import deque

from gstconform.test import Test
from gstconform.log import critical, error, warning, debug, info, exception
from gstconform.utils import SECOND, MSECOND, time_to_string, seconds_to_string
from gstconform.descriptor import ParseError, descriptor_path
from gstconform.recorder import DescriptorRecorder
from gstconform.validator import DescriptorValidator, FrameMismatch, FrameSlot, NO_MORE_DATA
from gstconform.observer import StreamObserver, EndpointSelector, ObserverError
from gstconform.graph import Endpoint
from gstconform.events import Buffer, ControlEvent, SeekFlags, BufferObserved, \
     ControlEventObserved, ChildAdded, StateReached, ErrorRaised, EndOfStream, \
     SegmentDone

WEDGE_MESSAGE = "No buffers or events were seen for a while"

# seeks are sent a bit after entering a phase
SEEK_DELAY = 100

class Phase:
    NONE = 0
    DESCRIPTOR_GENERATION = 1
    QUERIES = 2
    POSITION = 3
    BACKWARD_PLAYBACK = 4
    SEGMENT_SEEK = 5
    FAST_FORWARD = 6
    FAST_BACKWARD = 7
    UNLINK_PAD = 8
    DONE = 9

    _names = {
        NONE : "none",
        DESCRIPTOR_GENERATION : "descriptor-generation",
        QUERIES : "queries",
        POSITION : "position",
        BACKWARD_PLAYBACK : "backward-playback",
        SEGMENT_SEEK : "segment-seek",
        FAST_FORWARD : "fast-forward",
        FAST_BACKWARD : "fast-backward",
        UNLINK_PAD : "unlink-pad",
        DONE : "done",
        }

    @classmethod
    def name(cls, phase):
        return cls._names.get(phase, "unknown")

# check items decided by each phase
PHASE_CHECKS = {
    Phase.NONE : ["first-segment"],
    Phase.DESCRIPTOR_GENERATION : ["media-descriptor-generated"],
    Phase.QUERIES : ["seekable-detection", "duration-detection"],
    Phase.POSITION : ["position-detection"],
    Phase.BACKWARD_PLAYBACK : ["backward-playback"],
    Phase.SEGMENT_SEEK : ["segment-seek"],
    Phase.FAST_FORWARD : ["fast-forward"],
    Phase.FAST_BACKWARD : ["fast-backward"],
    Phase.UNLINK_PAD : ["unlink-pad-handling"],
    Phase.DONE : [],
    }

# phase => rate of the seek
SEEK_RATES = {
    Phase.BACKWARD_PLAYBACK : -1.0,
    Phase.SEGMENT_SEEK : 1.0,
    Phase.FAST_FORWARD : 2.0,
    Phase.FAST_BACKWARD : -2.0,
    }

SEEK_PHASES = [Phase.BACKWARD_PLAYBACK, Phase.SEGMENT_SEEK,
               Phase.FAST_FORWARD, Phase.FAST_BACKWARD]

# forward seeks never go further than that in the media
MAX_SEEK_START = 10 * SECOND


class EndpointInfo:
    """
    What was seen on one observed endpoint
    """

    def __init__(self, endpoint):
        self.endpoint = endpoint
        self.segment = None
        self.segment_seqnum = None
        # got a segment since the last seek was sent
        self.fresh = False
        self.stream = None
        self.bound = False
        self.buffers = 0


class TestContext:
    """
    All the mutable state of a running SeekModeTest

    lock only protects the notification queue. Everything else is only
    used from the main loop.
    """

    def __init__(self):
        self.lock = threading.Lock()
        # (serial, notification)
        self.queue = deque()
        self.posted = 0
        self.dispatchid = 0
        # serial of the notification being handled
        self.serial = 0

        self.phase = Phase.NONE
        self.recorder = None
        self.validator = None
        self.descriptor_location = None
        self.observer = None
        # endpoint => EndpointInfo
        self.endpoints = {}
        self.unexpected_streams = []

        # what we know about the media
        self.seekable = False
        self.duration = None
        self.playback_duration = None

        # timers
        self.wedgeid = 0
        self.seekid = 0
        self.advanceid = 0
        self.last_probe = 0

        # seqnum of the last seek sent
        self.seqnum = None
        self.seqnum_seen = False

        # POSITION
        self.first_position = None
        # the endpoint the first position was read on
        self.position_endpoint = None

        # seek phases
        self.seek_start = None
        self.seek_stop = None
        self.seek_rate = None
        # notifications up to that serial were posted before the seek,
        # None until the seek is sent
        self.seek_serial = None
        self.seek_expected = None
        self.waiting_segment = False
        self.waiting_first_buffer = False
        self.first_buffer_time = None

        # UNLINK_PAD
        self.unlinked = None
        self.expect_error = False

        # frames are compared until the first seek
        self.frame_detection = True
        self.frames_complete = False
        self.errors = []


class SeekModeTest(Test):
    """
    Base class for the seek conformance tests

    Subclasses choose the endpoints to observe with getEndpointSelector()
    and can create their own graph with createGraph().
    """
    __test_name__ = "seek-mode-test"
    __test_description__ = """Checks queries, trick-play seeks and endpoint
    unlinking against a media descriptor"""
    __test_arguments__ = {
        "location" : ( "Location of the media file to test",
                       None,
                       None ),
        "media-descriptor" : ( "Location of the media descriptor",
                               None,
                               "Defaults to <location>.xml, or <location>.subs.xml if subtitles is set" ),
        "generate-media-descriptor" : ( "Generate the media descriptor if there is none",
                                        True,
                                        None ),
        "playback-duration" : ( "How much of the media to play before validating playback (in ns)",
                                2 * SECOND,
                                "Never more than half the media duration" ),
        "segment-seek" : ( "Test segment seeking",
                           False,
                           None ),
        "check-clipping" : ( "Check that buffers are inside of the segment",
                             False,
                             None ),
        "seek-threshold" : ( "Tolerance on the position of seeks (in ns)",
                             3 * SECOND // 4,
                             None ),
        "position-threshold" : ( "Tolerance on position queries (in ns)",
                                 SECOND // 3,
                                 None ),
        "idle-timeout" : ( "How long without any buffer or event before the test is considered wedged (in ns)",
                           20 * SECOND,
                           None ),
        "wedge-check-interval" : ( "How often to check for wedges (in ms)",
                                   1000,
                                   None ),
        "subtitles" : ( "The media descriptor describes subtitles",
                        False,
                        None ),
        "element" : ( "Name of the element to observe (fnmatch pattern)",
                      None,
                      "Without it, every stream is observed where it enters its sink" ),
        }
    __test_checklist__ = {
        "valid-pipeline" : "The graph under test could be created and started",
        "install-probes" : "Probes could be installed on the tested endpoints",
        "comparison-file-parsed" : "The media descriptor could be parsed",
        "media-descriptor-generated" : "The media descriptor could be generated",
        "first-segment" : "A segment was received before the first buffer",
        "seekable-detection" : "The seekable query answer is correct",
        "duration-detection" : "The duration query answer is correct",
        "position-detection" : "The position query answer is correct",
        "backward-playback" : "Playing backward at rate -1 works",
        "segment-seek" : "Segment seeking works",
        "fast-forward" : "Playing forward at rate 2 works",
        "fast-backward" : "Playing backward at rate -2 works",
        "unlink-pad-handling" : "Unlinking an endpoint is handled properly",
        "seqnum-management" : "Events carry the seqnum of the seek that caused them",
        "segment-clipping" : "Buffers are inside of their segment",
        "frames-detection" : "Frames are the same as the recorded ones",
        "stream-detection" : "Streams are the same as the recorded ones",
        "tag-detection" : "Tags are the same as the recorded ones",
        }
    __test_extra_infos__ = {
        "media-duration" : "Duration of the media (in ns)",
        "media-seekable" : "Whether the media is seekable",
        "errors" : "Errors posted by the graph",
        }
    __test_timeout__ = 300

    def __init__(self, *args, **kwargs):
        Test.__init__(self, *args, **kwargs)
        self.graph = None
        self.ctx = TestContext()

    ## Methods that can be overridden by subclasses

    def createGraph(self):
        """
        Construct and return the gstconform.graph.Graph to test.

        Return None if an error occured.
        """
        from gstconform.gstgraph import GstGraph
        return GstGraph.from_location(self.getArgument("location"))

    def getEndpointSelector(self):
        """
        Returns the EndpointSelector of the endpoints to observe
        """
        element = self.getArgument("element")
        if element is not None:
            return EndpointSelector(element=element, direction=Endpoint.SRC)
        return EndpointSelector(klass=["Sink"], direction=Endpoint.SINK)

    ## Logging

    def _log(self, func, msg, *args):
        func("[%s] " + msg, Phase.name(self.ctx.phase), *args)

    ## Setup

    def setUp(self):
        if not Test.setUp(self):
            return False
        ctx = self.ctx
        try:
            self.graph = self.createGraph()
        except Exception:
            exception("Error while creating graph")
            self.graph = None
        self.validateStep("valid-pipeline", not self.graph == None,
                          self.graph == None and "Could not create the graph" or None)
        if self.graph == None:
            return False
        self.graph.set_notify_function(self.post)

        ctx.playback_duration = self.getArgument("playback-duration")
        if not self._setUpDescriptor():
            return False

        try:
            ctx.observer = StreamObserver.attach(self.graph.get_root(),
                                                 self.getEndpointSelector(),
                                                 self._probeCb,
                                                 self._childAddedCb)
        except ObserverError as e:
            self.validateStep("install-probes", False, str(e))
            return False
        self.validateStep("install-probes")
        return True

    def _setUpDescriptor(self):
        ctx = self.ctx
        location = self.getArgument("location")
        path = self.getArgument("media-descriptor")
        if path is None and location is not None:
            path = descriptor_path(location, self.getArgument("subtitles"))
        ctx.descriptor_location = path

        if path is not None and os.path.exists(path):
            self.skipStep("media-descriptor-generated",
                          "The media descriptor %s already exists" % path)
            try:
                ctx.validator = DescriptorValidator.from_file(path)
            except ParseError as e:
                warning("Could not parse %s : %s", path, e)
                self.validateStep("comparison-file-parsed", False,
                                  "Could not parse %s: %s" % (path, e))
                return True
            self.validateStep("comparison-file-parsed")
            return True

        if path is not None and self.getArgument("generate-media-descriptor"):
            ctx.phase = Phase.DESCRIPTOR_GENERATION
            return True

        msg = "No media descriptor at %s" % path
        self.skipStep("comparison-file-parsed", msg)
        self.skipStep("media-descriptor-generated",
                      "Media descriptor generation is disabled")
        return True

    def _setupFailed(self, checkitem, msg):
        self._log(error, "%s : %s", checkitem, msg)
        self.validateStep(checkitem, False, msg)
        self._finish()

    def test(self):
        ctx = self.ctx
        ctx.last_probe = self.clock()
        ctx.wedgeid = self.loop.timeout_add(self.getArgument("wedge-check-interval"),
                                            self._checkWedgeCb)
        if ctx.phase == Phase.DESCRIPTOR_GENERATION:
            self.ping()
            res = self.graph.discover()
            if res is None:
                self._setupFailed("media-descriptor-generated",
                                  "Could not discover %s" % self.getArgument("location"))
                return
            duration, seekable = res
            self._log(info, "Generating media descriptor, duration:%s seekable:%s",
                      time_to_string(duration), seekable)
            ctx.recorder = DescriptorRecorder(self.getArgument("location"),
                                              duration, seekable)
        if not self.graph.play():
            self._setupFailed("valid-pipeline", "Could not start the graph")

    def tearDown(self):
        ctx = self.ctx
        ctx.phase = Phase.DONE
        for attr in ["wedgeid", "seekid", "advanceid"]:
            if getattr(ctx, attr):
                self.loop.source_remove(getattr(ctx, attr))
                setattr(ctx, attr, 0)
        with ctx.lock:
            if ctx.dispatchid:
                self.loop.source_remove(ctx.dispatchid)
                ctx.dispatchid = 0
            ctx.queue.clear()
        # the graph must be stopped before the probes go away
        if self.graph:
            self.ping()
            self.graph.shutdown()
        if ctx.observer:
            ctx.observer.detach()
        if ctx.errors:
            self.extraInfo("errors", ctx.errors)
        self._checkEndOfRun()
        Test.tearDown(self)

    def _checkEndOfRun(self):
        ctx = self.ctx
        validator = ctx.validator
        if not self._checklist.is_set("test-started"):
            return
        if self.getArgument("check-clipping"):
            self.validateStep("segment-clipping")
        else:
            self.skipStep("segment-clipping", "Clipping is not checked for this element")
        if ctx.seqnum is None:
            self.skipStep("seqnum-management", "No seek was sent")
        else:
            self.validateStep("seqnum-management")

        if validator is None:
            msg = "No media descriptor to compare with"
            for item in ["frames-detection", "stream-detection", "tag-detection"]:
                self.skipStep(item, msg)
            return

        if not validator.detects_frames():
            self.skipStep("frames-detection",
                          "The media descriptor has no frames recorded")
        else:
            mismatches = validator.frame_count_mismatches(ctx.frames_complete)
            self.validateStep("frames-detection", mismatches == [],
                              "; ".join(mismatches) or None)

        msgs = ["Stream %d (%s) was not found" % (stream.id, stream.media_type)
                for stream in validator.unbound_streams()]
        msgs.extend(ctx.unexpected_streams)
        self.validateStep("stream-detection", msgs == [], "; ".join(msgs) or None)

        missing = validator.missing_tags()
        self.validateStep("tag-detection", missing == [],
                          missing and "Tags not found: %s" % (
                              "; ".join(str(tag.payload) for tag in missing)) or None)

    def _finish(self):
        if self.isStopping():
            return
        self.ctx.phase = Phase.DONE
        self.stop()

    ## Notifications

    def _probeCb(self, endpoint, item):
        # streaming thread
        if isinstance(item, Buffer):
            self.post(BufferObserved(endpoint, item))
        else:
            self.post(ControlEventObserved(endpoint, item))
        return True

    def _childAddedCb(self, container, child):
        self.post(ChildAdded(container, child))

    def post(self, notification):
        """
        Queue a notification for the main loop. Can be called from any
        thread.
        """
        ctx = self.ctx
        with ctx.lock:
            ctx.posted += 1
            ctx.queue.append((ctx.posted, notification))
            if not ctx.dispatchid:
                ctx.dispatchid = self.loop.idle_add(self._dispatchCb)

    def _dispatchCb(self):
        ctx = self.ctx
        while True:
            with ctx.lock:
                if not ctx.queue:
                    ctx.dispatchid = 0
                    return False
                ctx.serial, notification = ctx.queue.popleft()
            if ctx.phase == Phase.DONE:
                continue
            self._handleNotification(notification)

    def _handleNotification(self, notification):
        if isinstance(notification, BufferObserved):
            self.ctx.last_probe = self.clock()
            self._handleBuffer(notification.endpoint, notification.buffer)
        elif isinstance(notification, ControlEventObserved):
            self.ctx.last_probe = self.clock()
            self._handleEvent(notification.endpoint, notification.event)
        elif isinstance(notification, ErrorRaised):
            self._handleError(notification)
        elif isinstance(notification, EndOfStream):
            self._handleEos()
        elif isinstance(notification, SegmentDone):
            self._handleSegmentDone()
        elif isinstance(notification, StateReached):
            self._log(debug, "Graph reached state %s", notification.state)
        elif isinstance(notification, ChildAdded):
            self._log(debug, "%r added to %r", notification.child,
                      notification.container)
        else:
            self._log(warning, "Unknown notification %r", notification)

    def _getEndpointInfo(self, endpoint):
        ctx = self.ctx
        epinfo = ctx.endpoints.get(endpoint)
        if epinfo is None:
            epinfo = EndpointInfo(endpoint)
            ctx.endpoints[endpoint] = epinfo
        if not epinfo.bound:
            self._bindStream(epinfo)
        return epinfo

    def _bindStream(self, epinfo):
        ctx = self.ctx
        endpoint = epinfo.endpoint
        media_type = endpoint.get_media_type()
        if media_type is None:
            return
        epinfo.bound = True
        if ctx.phase == Phase.DESCRIPTOR_GENERATION:
            epinfo.stream = ctx.recorder.add_stream(endpoint.name, media_type,
                                                    endpoint)
        elif ctx.validator is not None:
            epinfo.stream = ctx.validator.bind_stream(endpoint.name, media_type,
                                                      endpoint)
            if epinfo.stream is None:
                ctx.unexpected_streams.append(
                    "No stream recorded for %s (%s)" % (endpoint.name, media_type))

    ## Control events

    def _handleEvent(self, endpoint, event):
        ctx = self.ctx
        epinfo = self._getEndpointInfo(endpoint)
        if ctx.phase != Phase.DESCRIPTOR_GENERATION:
            self._checkSeqnum(event)

        if event.kind == ControlEvent.SEGMENT:
            self._log(debug, "Segment on %s : %r", endpoint.name, event.segment)
            if ctx.waiting_segment and self._isStale():
                self._log(debug, "Ignoring segment from a previous seek")
                return
            epinfo.segment = event.segment
            epinfo.segment_seqnum = event.seqnum
            epinfo.fresh = True
            if ctx.waiting_segment:
                self._checkSeekSegment(event.segment)
        elif event.kind == ControlEvent.TAG:
            self._handleTags(event.tags)

    def _checkSeqnum(self, event):
        ctx = self.ctx
        if event.seqnum is None:
            return
        # only checked once we sent a seek
        if ctx.seqnum is None:
            return
        if event.seqnum == ctx.seqnum:
            ctx.seqnum_seen = True
        elif ctx.seqnum_seen:
            self.validateStep("seqnum-management", False,
                              "Got %s event with seqnum %d instead of %d" % (
                                  event.name, event.seqnum, ctx.seqnum))

    def _handleTags(self, tags):
        ctx = self.ctx
        if tags is None:
            return
        if ctx.phase == Phase.DESCRIPTOR_GENERATION:
            ctx.recorder.add_tags(tags)
            return
        validator = ctx.validator
        if validator is None:
            return
        if validator.match_tags(tags):
            self._log(debug, "Found tag %s", tags)
        elif not validator.has_tag(tags):
            self.validateStep("tag-detection", False,
                              "Unexpected tag %s" % tags)

    ## Buffers

    def _handleBuffer(self, endpoint, buf):
        ctx = self.ctx
        epinfo = self._getEndpointInfo(endpoint)
        epinfo.buffers += 1

        if ctx.phase == Phase.DESCRIPTOR_GENERATION:
            if epinfo.stream is not None:
                ctx.recorder.add_buffer(epinfo.stream, buf)
            return

        self._compareFrame(epinfo, buf)
        if self.getArgument("check-clipping"):
            self._checkClipping(epinfo, buf)

        phase = ctx.phase
        if phase == Phase.NONE:
            if epinfo.segment is None:
                self.validateStep("first-segment", False,
                                  "Got a buffer on %s before any segment" % endpoint.name)
            else:
                self.validateStep("first-segment")
            self._nextPhase()
        elif phase == Phase.POSITION:
            self._handlePositionBuffer(epinfo, buf)
        elif phase in SEEK_PHASES:
            self._handleSeekBuffer(epinfo, buf)
        elif phase == Phase.UNLINK_PAD:
            if (ctx.unlinked is not None and not ctx.expect_error
                and endpoint is not ctx.unlinked and not self._isStale()):
                self.validateStep("unlink-pad-handling")
                self._nextPhase()

    def _compareFrame(self, epinfo, buf):
        ctx = self.ctx
        validator = ctx.validator
        if (not ctx.frame_detection or validator is None
            or not validator.detects_frames() or epinfo.stream is None):
            return
        expected = FrameSlot()
        res = validator.compare_buffer(epinfo.stream, buf, expected)
        if res is NO_MORE_DATA:
            self._log(debug, "No more recorded frames on stream %d",
                      epinfo.stream.id)
        elif res is not None:
            self._log(warning, "%s", res)
            self.validateStep("frames-detection", False, str(res))

    def _checkClipping(self, epinfo, buf):
        segment = epinfo.segment
        if segment is None or buf.timestamp is None:
            return
        if self._checklist.has_failed("segment-clipping"):
            return
        stop = buf.timestamp
        if buf.duration is not None:
            stop += buf.duration
        if not segment.clip(buf.timestamp, stop):
            self.validateStep("segment-clipping", False,
                              "Buffer %s-%s on %s is outside of segment %s-%s" % (
                                  time_to_string(buf.timestamp), time_to_string(stop),
                                  epinfo.endpoint.name, time_to_string(segment.start),
                                  time_to_string(segment.stop)))

    def _streamTime(self, epinfo, buf):
        if epinfo.segment is None:
            return buf.timestamp
        res = epinfo.segment.to_stream_time(buf.timestamp)
        if res is None:
            return buf.timestamp
        return res

    ## Phases

    def _nextPhase(self):
        ctx = self.ctx
        phase = ctx.phase
        if phase == Phase.DONE:
            return
        if phase == Phase.NONE:
            nextphase = Phase.QUERIES
        elif phase == Phase.POSITION:
            nextphase = self._firstSeekPhase()
        elif phase in SEEK_PHASES[:-1]:
            nextphase = SEEK_PHASES[SEEK_PHASES.index(phase) + 1]
        else:
            nextphase = phase + 1
        if phase in SEEK_PHASES and not nextphase in SEEK_PHASES:
            ctx.waiting_segment = False
            ctx.waiting_first_buffer = False
        self._enterPhase(nextphase)

    def _firstSeekPhase(self):
        ctx = self.ctx
        msg = None
        if not ctx.seekable:
            msg = "The media is not seekable"
        elif not ctx.duration:
            msg = "The media duration is unknown"
        if msg is None:
            return Phase.BACKWARD_PLAYBACK
        for phase in SEEK_PHASES:
            for item in PHASE_CHECKS[phase]:
                self.skipStep(item, msg)
        return Phase.UNLINK_PAD

    def _enterPhase(self, phase):
        ctx = self.ctx
        self._log(info, "Entering phase %s", Phase.name(phase))
        ctx.phase = phase
        if phase == Phase.QUERIES:
            self._doQueries()
            self._nextPhase()
        elif phase == Phase.POSITION:
            ctx.first_position = None
            ctx.position_endpoint = None
        elif phase in SEEK_PHASES:
            self._startSeekPhase(phase)
        elif phase == Phase.UNLINK_PAD:
            self._startUnlink()
        elif phase == Phase.DONE:
            self._finish()

    def _failPhase(self, msg):
        ctx = self.ctx
        for item in PHASE_CHECKS[ctx.phase]:
            if not self._checklist.is_set(item):
                self.validateStep(item, False, msg)

    def _advanceCb(self, phase):
        self.ctx.advanceid = 0
        if self.ctx.phase == phase:
            self._nextPhase()
        return False

    ## QUERIES

    def _doQueries(self):
        ctx = self.ctx
        validator = ctx.validator
        seekable = self.graph.query_seekable()
        duration = self.graph.query_duration()
        self._log(debug, "seekable:%r duration:%s", seekable, time_to_string(duration))

        if seekable is None:
            self.skipStep("seekable-detection", "The seeking query is not supported")
            ctx.seekable = validator is not None and validator.get_seekable()
        else:
            ctx.seekable = seekable
            if validator is None:
                self.validateStep("seekable-detection", True,
                                  "Seekable: %s, not verified without a media descriptor"
                                  % str(seekable).lower())
            else:
                expected = validator.get_seekable()
                self.validateStep("seekable-detection", expected == seekable,
                                  expected != seekable and "Expected seekable %s, got %s" % (
                                      str(expected).lower(), str(seekable).lower()) or None)

        if duration is None:
            self.skipStep("duration-detection", "The duration query is not supported")
            if validator is not None:
                ctx.duration = validator.get_duration()
        else:
            ctx.duration = duration
            if validator is None:
                self.validateStep("duration-detection", True,
                                  "Duration: %s, not verified without a media descriptor"
                                  % time_to_string(duration))
            else:
                expected = validator.get_duration()
                self.validateStep("duration-detection", expected == duration,
                                  expected != duration and "Expected duration %s, got %s" % (
                                      time_to_string(expected), time_to_string(duration)) or None)

        if ctx.duration:
            ctx.playback_duration = min(ctx.playback_duration, ctx.duration // 2)
        self.extraInfo("media-duration", ctx.duration)
        self.extraInfo("media-seekable", ctx.seekable)

    ## POSITION

    def _handlePositionBuffer(self, epinfo, buf):
        ctx = self.ctx
        position = self._streamTime(epinfo, buf)
        if position is None:
            return
        if ctx.position_endpoint is not None and epinfo.endpoint is not ctx.position_endpoint:
            return
        if ctx.first_position is None:
            ctx.first_position = position
            ctx.position_endpoint = epinfo.endpoint
            return
        if position - ctx.first_position < ctx.playback_duration:
            return

        queried = self.graph.query_position()
        if queried is None:
            self.skipStep("position-detection", "The position query is not supported")
        else:
            if abs(queried - position) <= self.getArgument("position-threshold"):
                self.validateStep("position-detection")
            else:
                self.validateStep("position-detection", False,
                                  "Expected position ~%s, got %s" % (
                                      time_to_string(position), time_to_string(queried)))
        self._nextPhase()

    ## Seek phases

    def _getSeekRange(self, phase):
        """
        Returns (start, stop, expected) for the seek of phase, expected
        being the stream time of the first buffer after the seek.
        """
        duration = self.ctx.duration
        rate = SEEK_RATES[phase]
        if rate < 0:
            return (0, duration, duration)
        target = min(MAX_SEEK_START, duration // 2)
        if phase == Phase.SEGMENT_SEEK:
            return (0, target, 0)
        return (target, None, target)

    def _startSeekPhase(self, phase):
        ctx = self.ctx
        if phase == Phase.SEGMENT_SEEK and not self.getArgument("segment-seek"):
            self.skipStep("segment-seek", "Segment seeking is not tested for this element")
            self._nextPhase()
            return
        # frames are only compared for the initial playback
        ctx.frame_detection = False
        ctx.waiting_segment = True
        ctx.waiting_first_buffer = True
        ctx.first_buffer_time = None
        ctx.seek_serial = None
        for epinfo in ctx.endpoints.values():
            epinfo.fresh = False
        ctx.seekid = self.loop.timeout_add(SEEK_DELAY, self._sendSeekCb, phase)

    def _isStale(self):
        """
        Whether the notification being handled was posted before the last
        seek or unlink
        """
        ctx = self.ctx
        return ctx.seek_serial is None or ctx.serial <= ctx.seek_serial

    def _nextSeqnum(self):
        ctx = self.ctx
        if ctx.seqnum is not None and not ctx.seqnum_seen:
            self.validateStep("seqnum-management", False,
                              "Seqnum %d was never seen" % ctx.seqnum)
        ctx.seqnum = (ctx.seqnum or 0) + 1
        ctx.seqnum_seen = False
        return ctx.seqnum

    def _sendSeekCb(self, phase):
        ctx = self.ctx
        ctx.seekid = 0
        if ctx.phase != phase:
            return False
        start, stop, expected = self._getSeekRange(phase)
        rate = SEEK_RATES[phase]
        flags = SeekFlags.FLUSH | SeekFlags.ACCURATE
        if phase == Phase.SEGMENT_SEEK:
            flags |= SeekFlags.SEGMENT

        ctx.seek_start = start
        ctx.seek_stop = stop
        ctx.seek_rate = rate
        ctx.seek_expected = expected
        with ctx.lock:
            ctx.seek_serial = ctx.posted

        seqnum = self._nextSeqnum()
        self._log(info, "Seeking to %s-%s, rate %g, seqnum %d",
                  time_to_string(start), time_to_string(stop), rate, seqnum)
        if not self.graph.send_seek(rate, start, stop, flags, seqnum):
            # the graph never saw that seqnum
            ctx.seqnum_seen = True
            ctx.waiting_segment = False
            self._failPhase("Could not seek to %s at rate %g" % (
                seconds_to_string(start), rate))
            self._nextPhase()
        return False

    def _checkSeekSegment(self, segment):
        ctx = self.ctx
        ctx.waiting_segment = False
        threshold = self.getArgument("seek-threshold")
        rate = segment.effective_rate()
        if rate != ctx.seek_rate:
            self._failPhase("Expected segment with rate %g, got rate %g" % (
                ctx.seek_rate, rate))
            self._nextPhase()
        elif abs(segment.time - ctx.seek_start) > threshold:
            self._failPhase("Expected segment at ~%s, got %s, rate %g" % (
                seconds_to_string(ctx.seek_start), seconds_to_string(segment.time),
                rate))
            self._nextPhase()

    def _handleSeekBuffer(self, epinfo, buf):
        ctx = self.ctx
        if ctx.waiting_segment or not epinfo.fresh or self._isStale():
            return
        position = self._streamTime(epinfo, buf)
        if position is None:
            return
        if ctx.waiting_first_buffer:
            ctx.waiting_first_buffer = False
            diff = abs(position - ctx.seek_expected)
            if diff > self.getArgument("seek-threshold"):
                self._failPhase("expected ~%s, got %s, rate %g" % (
                    seconds_to_string(ctx.seek_expected),
                    seconds_to_string(position), ctx.seek_rate))
                self._nextPhase()
                return
            ctx.first_buffer_time = position
            return
        if abs(position - ctx.first_buffer_time) >= ctx.playback_duration:
            self._log(info, "Playback is stable at %s", time_to_string(position))
            for item in PHASE_CHECKS[ctx.phase]:
                self.validateStep(item)
            self._nextPhase()

    def _handleSegmentDone(self):
        ctx = self.ctx
        if (ctx.phase != Phase.SEGMENT_SEEK or ctx.waiting_segment
            or ctx.waiting_first_buffer):
            self._log(debug, "Ignoring segment-done")
            return
        self.validateStep("segment-seek")
        self._nextPhase()

    ## UNLINK_PAD

    def _startUnlink(self):
        ctx = self.ctx
        endpoints = ctx.observer.get_endpoints()
        if not endpoints:
            self._failPhase("There is no endpoint to unlink")
            self._nextPhase()
            return

        endpoint = endpoints[0]
        if len(endpoints) == 1:
            # the graph has nowhere to send data anymore, it must error out
            ctx.expect_error = True
        elif ctx.seekable:
            # go back to the beginning so we don't hit EOS meanwhile
            self.graph.send_seek(1.0, 0, None, SeekFlags.FLUSH, self._nextSeqnum())

        self._log(info, "Unlinking %r, %d endpoints", endpoint, len(endpoints))
        self.ping()
        ctx.unlinked = endpoint
        with ctx.lock:
            ctx.seek_serial = ctx.posted
        if not self.graph.unlink(endpoint):
            self._failPhase("Could not unlink %s" % endpoint.name)
            self._nextPhase()

    ## Graph notifications

    def _handleError(self, notification):
        ctx = self.ctx
        msg = "%s: %s" % (notification.source, notification.message)
        ctx.errors.append((notification.source, notification.message,
                           notification.debug))
        if ctx.phase == Phase.UNLINK_PAD and ctx.expect_error:
            self._log(info, "Got expected error %s", msg)
            self.validateStep("unlink-pad-handling")
            self._nextPhase()
            return
        self._log(warning, "Got an error : %s (%s)", msg, notification.debug)
        if ctx.phase == Phase.DESCRIPTOR_GENERATION:
            self._setupFailed("media-descriptor-generated",
                              "Error while generating the media descriptor: %s" % msg)
            return
        self._failPhase("The graph posted an error: %s" % msg)
        self._finish()

    def _handleEos(self):
        ctx = self.ctx
        phase = ctx.phase
        self._log(debug, "End of stream")
        if phase == Phase.DESCRIPTOR_GENERATION:
            self._finishGeneration()
            return
        if ctx.frame_detection:
            ctx.frames_complete = True
        if phase == Phase.SEGMENT_SEEK:
            self._failPhase("Got end of stream instead of segment-done")
        elif phase == Phase.UNLINK_PAD and not ctx.expect_error:
            self._failPhase("Got end of stream after unlinking %s" % ctx.unlinked.name)
        elif phase == Phase.UNLINK_PAD:
            self._failPhase("Got end of stream instead of an error after unlinking the only endpoint")
        else:
            self._failPhase("Reached end of stream before the %s phase was over"
                            % Phase.name(phase))
        self._nextPhase()

    ## Wedge detection

    def _checkWedgeCb(self):
        ctx = self.ctx
        if ctx.phase == Phase.DONE:
            ctx.wedgeid = 0
            return False
        now = self.clock()
        if (now - ctx.last_probe) * SECOND <= self.getArgument("idle-timeout"):
            return True
        self._log(warning, "Wedged for %.3fs", now - ctx.last_probe)
        ctx.last_probe = now
        if ctx.phase == Phase.DESCRIPTOR_GENERATION:
            ctx.wedgeid = 0
            self._setupFailed("media-descriptor-generated", WEDGE_MESSAGE)
            return False
        self._failPhase(WEDGE_MESSAGE)
        if not ctx.advanceid:
            ctx.advanceid = self.loop.idle_add(self._advanceCb, ctx.phase)
        return True

    ## Descriptor generation

    def _finishGeneration(self):
        ctx = self.ctx
        path = ctx.descriptor_location
        if not ctx.recorder.write(path):
            self._setupFailed("media-descriptor-generated",
                              "Could not write the media descriptor to %s" % path)
            return
        try:
            ctx.validator = DescriptorValidator.from_file(path)
        except ParseError as e:
            self._setupFailed("media-descriptor-generated",
                              "The generated media descriptor is invalid: %s" % e)
            return
        self.validateStep("media-descriptor-generated")
        self.validateStep("comparison-file-parsed")

        # start over, this time comparing against the descriptor
        ctx.endpoints = {}
        ctx.seqnum = None
        ctx.seqnum_seen = False
        ctx.phase = Phase.NONE
        self._log(info, "Media descriptor generated, restarting")
        self.ping()
        if not self.graph.restart():
            self._setupFailed("valid-pipeline", "Could not restart the graph")


class DemuxerSeekModeTest(SeekModeTest):
    """
    Seek conformance test of a demuxer
    """
    __test_name__ = "demuxer-seek-mode-test"
    __test_description__ = """Checks a demuxer with all the seek modes"""
    __test_arguments__ = {
        "segment-seek" : ( "Test segment seeking",
                           True,
                           None ),
        "demuxer" : ( "Name of the demuxer to test (fnmatch pattern)",
                      None,
                      "Without it, every demuxer of the graph is tested" ),
        }
    __test_extra_infos__ = {
        "testing-demuxer" : "The tested element is a demuxer",
        }

    def getEndpointSelector(self):
        return EndpointSelector(element=self.getArgument("demuxer"),
                                klass=["Demux"], direction=Endpoint.SRC)

    def test(self):
        self.extraInfo("testing-demuxer", True)
        SeekModeTest.test(self)


class DecoderSeekModeTest(SeekModeTest):
    """
    Seek conformance test of a decoder or parser
    """
    __test_name__ = "decoder-seek-mode-test"
    __test_description__ = """Checks a decoder or a parser with all the seek modes"""
    __test_arguments__ = {
        "segment-seek" : ( "Test segment seeking",
                           False,
                           None ),
        "check-clipping" : ( "Check that buffers are inside of the segment",
                             True,
                             None ),
        "decoder-name" : ( "Name of the decoder or parser to test (fnmatch pattern)",
                           None,
                           "Without it, every decoder of the graph is tested. Parsers are only tested by name" ),
        }
    __test_extra_infos__ = {
        "testing-decoder-or-parser" : "The tested element is a decoder or a parser",
        }

    def getEndpointSelector(self):
        name = self.getArgument("decoder-name")
        if name is not None:
            return EndpointSelector(element=name, direction=Endpoint.SRC)
        return EndpointSelector(klass=["Decoder"], direction=Endpoint.SRC)

    def test(self):
        self.extraInfo("testing-decoder-or-parser", True)
        SeekModeTest.test(self)
