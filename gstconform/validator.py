# GStreamer conformance tests
#
#       validator.py
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
Media descriptor validation

A DescriptorValidator compares what is observed while running a media file
against the Descriptor previously recorded for it.
"""

from gstconform import descriptor as _descriptor
from gstconform.descriptor import Frame
from gstconform.log import critical, error, warning, debug, info

_FRAME_FIELDS = ["offset", "offset_end", "duration", "timestamp", "is_keyframe"]

class _NoMoreData:

    def __repr__(self):
        return "NO_MORE_DATA"

    def __str__(self):
        return "no more data"

# returned by compare_frame when all recorded frames were already compared
NO_MORE_DATA = _NoMoreData()


class FrameSlot(Frame):
    """
    Receives the expected values of a compared frame
    """

    def __init__(self):
        Frame.__init__(self, None)


class FrameMismatch:
    """
    Difference between a recorded frame and an observed one
    """

    def __init__(self, stream, frame_id, expected, observed):
        self.stream = stream
        self.frame_id = frame_id
        # dictionnaries of field name => value
        self.expected = expected
        self.observed = observed

    def fields(self):
        """
        Returns the names of the fields which differ
        """
        return [name for name in _FRAME_FIELDS
                if self.expected[name] != self.observed[name]]

    def __str__(self):
        diffs = ["%s: expected %r, got %r" % (name, self.expected[name],
                                               self.observed[name])
                 for name in self.fields()]
        return "Stream %d frame %d differs (%s)" % (self.stream.id,
                                                    self.frame_id,
                                                    ", ".join(diffs))

    def __repr__(self):
        return "<FrameMismatch %s>" % self


class DescriptorValidator:
    """
    Checks streams, frames and tags against a Descriptor
    """

    def __init__(self, descriptor):
        self.descriptor = descriptor

    @classmethod
    def load(cls, text):
        """
        Returns a validator for the serialized descriptor text.

        Raises gstconform.descriptor.ParseError.
        """
        return cls(_descriptor.deserialize(text))

    @classmethod
    def from_file(cls, path):
        """
        Returns a validator for the descriptor stored at path.

        Raises gstconform.descriptor.ParseError.
        """
        return cls(_descriptor.load(path))

    @classmethod
    def from_descriptor(cls, descriptor):
        return cls(descriptor)

    def get_duration(self):
        return self.descriptor.duration

    def get_seekable(self):
        return self.descriptor.seekable

    def detects_frames(self):
        return self.descriptor.frame_detection

    ## streams

    def bind_stream(self, endpoint_name, media_type, endpoint=None):
        """
        Returns the Stream expected for the given endpoint, or None if
        the descriptor has no such stream.

        The first unbound Stream with an equal media_type is used.
        """
        if endpoint is None:
            endpoint = endpoint_name
        for stream in self.descriptor.streams:
            if stream.endpoint == endpoint:
                return stream
        for stream in self.descriptor.streams:
            if not stream.is_bound() and stream.media_type == media_type:
                debug("%s matches stream %d", endpoint_name, stream.id)
                stream.endpoint = endpoint
                return stream
        warning("No stream matching %s : %s", endpoint_name, media_type)
        return None

    def all_streams_found(self):
        return all(stream.is_bound() for stream in self.descriptor.streams)

    def unbound_streams(self):
        return [stream for stream in self.descriptor.streams
                if not stream.is_bound()]

    def reset(self):
        """
        Unbinds all streams and rewinds their frames
        """
        for stream in self.descriptor.streams:
            stream.endpoint = None
            stream.cursor = 0
            stream.observed = 0

    ## frames

    def compare_frame(self, stream, offset, offset_end, duration, timestamp,
                      is_keyframe, expected=None):
        """
        Compares the observed frame values with the next recorded frame of
        stream.

        Returns None if they are equal, a FrameMismatch if they are not and
        NO_MORE_DATA if there are no recorded frames left.
        If expected (a FrameSlot) is given, it is filled with the recorded
        values.
        """
        stream.observed += 1
        if stream.cursor >= len(stream.frames):
            return NO_MORE_DATA
        frame = stream.frames[stream.cursor]
        stream.cursor += 1

        if expected is not None:
            expected.id = frame.id
            for name in _FRAME_FIELDS:
                setattr(expected, name, getattr(frame, name))

        observed = {"offset": offset,
                    "offset_end": offset_end,
                    "duration": duration,
                    "timestamp": timestamp,
                    "is_keyframe": bool(is_keyframe)}
        recorded = dict((name, getattr(frame, name)) for name in _FRAME_FIELDS)
        recorded["is_keyframe"] = bool(recorded["is_keyframe"])
        if observed == recorded:
            return None
        return FrameMismatch(stream, frame.id, recorded, observed)

    def compare_buffer(self, stream, buffer, expected=None):
        """
        compare_frame() for a gstconform.events.Buffer
        """
        return self.compare_frame(stream, buffer.offset, buffer.offset_end,
                                  buffer.duration, buffer.timestamp,
                                  buffer.is_keyframe, expected)

    def frame_count_mismatches(self, complete):
        """
        Returns a list of messages describing the bound streams for which
        more frames were observed than recorded.

        If complete is True, the whole media went through and any
        difference is reported.
        """
        res = []
        for stream in self.descriptor.streams:
            if not stream.is_bound():
                continue
            recorded = len(stream.frames)
            if stream.observed > recorded or (complete
                                              and stream.observed != recorded):
                res.append("Stream %d (%s): %d frames seen, %d recorded" % (
                    stream.id, stream.endpoint_name, stream.observed, recorded))
        return res

    ## tags

    def match_tags(self, payload):
        """
        Marks the first recorded tag equal to payload as found.

        Returns False if there was no such tag.
        """
        payload = payload.copy()
        payload.remove_field("source-pad")
        for tag in self.descriptor.iter_tags():
            if not tag.found and tag.payload == payload:
                tag.found = True
                return True
        return False

    def all_tags_found(self):
        return all(tag.found for tag in self.descriptor.iter_tags())

    def missing_tags(self):
        return [tag for tag in self.descriptor.iter_tags() if not tag.found]

    def has_tag(self, payload):
        """
        Returns True if payload was recorded, whether it was found already
        or not.
        """
        payload = payload.copy()
        payload.remove_field("source-pad")
        return any(tag.payload == payload for tag in self.descriptor.iter_tags())
