# GStreamer conformance tests
#
#       recorder.py
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
Media descriptor recording

A DescriptorRecorder builds a Descriptor while a reference run of the
media goes through the graph, and writes it out once that run is over.
"""

from gstconform.descriptor import Descriptor, Stream, Frame, Tag, TagGroup, save
from gstconform.log import critical, error, warning, debug, info

# tag fields which depend on the graph and not on the media
_VOLATILE_TAG_FIELDS = ["source-pad"]

class DescriptorRecorder:
    """
    Records streams, frames and tags into self.descriptor
    """

    def __init__(self, location, duration=None, seekable=False):
        self.descriptor = Descriptor(location, duration=duration,
                                     seekable=seekable)

    def add_stream(self, endpoint_name, media_type, endpoint=None):
        """
        Returns the Stream recording the traffic of the given endpoint.

        A Stream already bound to endpoint is returned as is. Otherwise the
        first unbound Stream with an equal media_type gets bound, and a new
        Stream is only created if there is none.
        """
        if endpoint is None:
            endpoint = endpoint_name
        for stream in self.descriptor.streams:
            if stream.endpoint == endpoint:
                return stream
        for stream in self.descriptor.streams:
            if not stream.is_bound() and stream.media_type == media_type:
                debug("Re-using stream %d for %s", stream.id, endpoint_name)
                stream.endpoint = endpoint
                return stream

        stream = Stream(len(self.descriptor.streams), media_type, endpoint_name)
        stream.endpoint = endpoint
        self.descriptor.streams.append(stream)
        info("New stream %d on %s : %s", stream.id, endpoint_name, media_type)
        return stream

    def add_frame(self, stream, offset, offset_end, duration, timestamp,
                  is_keyframe):
        self.descriptor.frame_detection = True
        frame = Frame(len(stream.frames), offset=offset, offset_end=offset_end,
                      duration=duration, timestamp=timestamp,
                      is_keyframe=is_keyframe)
        stream.frames.append(frame)
        return frame

    def add_buffer(self, stream, buffer):
        """
        Records a gstconform.events.Buffer as the next frame of stream
        """
        return self.add_frame(stream, buffer.offset, buffer.offset_end,
                              buffer.duration, buffer.timestamp,
                              buffer.is_keyframe)

    def add_tags(self, payload):
        """
        Records the tag payload (a gstconform.caps.Structure).

        Returns False if an equal payload was already recorded, else True.
        """
        payload = payload.copy()
        for field in _VOLATILE_TAG_FIELDS:
            payload.remove_field(field)

        for tag in self.descriptor.iter_tags():
            if tag.payload == payload:
                debug("Tag already recorded : %s", payload)
                return False

        if not self.descriptor.tag_groups:
            self.descriptor.tag_groups.append(TagGroup())
        self.descriptor.tag_groups[0].tags.append(Tag(payload))
        debug("New tag : %s", payload)
        return True

    def unbind_all(self):
        """
        Forget about the endpoints streams are bound to
        """
        for stream in self.descriptor.streams:
            stream.endpoint = None

    def write(self, path):
        """
        Writes the recorded Descriptor to path.
        Returns True on success.
        """
        res = save(self.descriptor, path)
        if res:
            info("Wrote media descriptor %s", path)
        else:
            error("Could not write media descriptor %s", path)
        return res
