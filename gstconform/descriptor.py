# GStreamer conformance tests
#
#       descriptor.py
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
Media descriptors

A media descriptor is the recorded ground truth of a media file: its
streams with their caps and frames, the tags it contains, its duration
and whether it is seekable.

Descriptors are stored as xml files next to the media file they describe:

<file duration="..." frame-detection="1" location="..." seekable="1">
  <streams>
    <stream caps="..." id="0" padname="video_00">
      <frame duration="..." id="0" is-keyframe="1" offset="..." offset-end="..." timestamp="..." />
    </stream>
  </streams>
  <tags>
    <tag content="taglist, ..." />
  </tags>
</file>
"""

import xml.etree.ElementTree as ET
from xml.sax.saxutils import quoteattr

from gstconform.caps import Caps, Structure, CapsParseError
from gstconform.utils import CLOCK_TIME_NONE
from gstconform.log import critical, error, warning, debug, info

DESCRIPTOR_EXT = "xml"
SUBTITLES_DESCRIPTOR_EXT = "subs.xml"

def descriptor_path(location, subtitles=False):
    """
    Returns the location of the media descriptor for the given media file
    """
    if subtitles:
        return "%s.%s" % (location, SUBTITLES_DESCRIPTOR_EXT)
    return "%s.%s" % (location, DESCRIPTOR_EXT)


class ParseError(ValueError):
    """
    Raised when a media descriptor can not be deserialized.

    node and field identify where the problem was found.
    """

    def __init__(self, node, field, message):
        ValueError.__init__(self, "<%s> %s: %s" % (node, field, message))
        self.node = node
        self.field = field


class Frame:

    def __init__(self, id, offset=None, offset_end=None, duration=None,
                 timestamp=None, is_keyframe=False):
        self.id = id
        self.offset = offset
        self.offset_end = offset_end
        self.duration = duration
        self.timestamp = timestamp
        self.is_keyframe = is_keyframe

    def fields(self):
        return (self.offset, self.offset_end, self.duration,
                self.timestamp, self.is_keyframe)

    def __eq__(self, other):
        if not isinstance(other, Frame):
            return NotImplemented
        return self.id == other.id and self.fields() == other.fields()

    def __repr__(self):
        return "<Frame %d ts:%r dur:%r offset:%r-%r key:%r>" % (
            self.id, self.timestamp, self.duration, self.offset,
            self.offset_end, self.is_keyframe)


class Stream:
    """
    One elementary stream of a media file and its frames
    """

    def __init__(self, id, media_type, endpoint_name=None):
        self.id = id
        self.media_type = media_type
        self.endpoint_name = endpoint_name
        self.frames = []
        # Testing infos, never serialized
        self.endpoint = None
        self.cursor = 0
        self.observed = 0

    def is_bound(self):
        return self.endpoint is not None

    def __eq__(self, other):
        if not isinstance(other, Stream):
            return NotImplemented
        return (self.id == other.id and self.media_type == other.media_type
                and self.endpoint_name == other.endpoint_name
                and self.frames == other.frames)

    def __repr__(self):
        return "<Stream %d %s (%d frames)>" % (self.id, self.media_type,
                                               len(self.frames))


class Tag:

    def __init__(self, payload):
        self.payload = payload
        # Testing infos, never serialized
        self.found = False

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return self.payload == other.payload

    def __repr__(self):
        return "<Tag %s>" % self.payload


class TagGroup:

    def __init__(self, tags=None):
        self.tags = list(tags or [])

    def __eq__(self, other):
        if not isinstance(other, TagGroup):
            return NotImplemented
        # tags within a group are unordered
        if len(self.tags) != len(other.tags):
            return False
        return (all(tag in other.tags for tag in self.tags)
                and all(tag in self.tags for tag in other.tags))


class Descriptor:
    """
    Root of a media descriptor.

    duration and seekable can not be changed once the descriptor exists.
    """

    def __init__(self, location, duration=None, seekable=False,
                 frame_detection=False):
        self.location = location or ""
        self._duration = duration
        self._seekable = bool(seekable)
        self.frame_detection = frame_detection
        self.streams = []
        self.tag_groups = []

    @property
    def duration(self):
        return self._duration

    @property
    def seekable(self):
        return self._seekable

    def iter_tags(self):
        for group in self.tag_groups:
            for tag in group.tags:
                yield tag

    def get_frames(self, stream=None, key=None):
        """
        Returns the recorded frames of the given stream, or of all
        streams if stream is None.

        If key is given, the frames are sorted with it.
        """
        frames = []
        for snode in self.streams:
            if stream is None or snode is stream:
                frames.extend(snode.frames)
        if key is not None:
            frames.sort(key=key)
        return frames

    def get_endpoint_names(self):
        return [stream.endpoint_name for stream in self.streams]

    def __eq__(self, other):
        if not isinstance(other, Descriptor):
            return NotImplemented
        return (self.location == other.location
                and self.duration == other.duration
                and self.seekable == other.seekable
                and self.frame_detection == other.frame_detection
                and self.streams == other.streams
                and self.tag_groups == other.tag_groups)

    def __repr__(self):
        return "<Descriptor %s streams:%d>" % (self.location, len(self.streams))


## Serialization

def _time(value):
    if value is None:
        return str(CLOCK_TIME_NONE)
    return str(value)

def _bool(value):
    if value:
        return "1"
    return "0"

def _element(name, attributes, close=False):
    attrs = " ".join("%s=%s" % (key, quoteattr(value))
                     for key, value in attributes)
    if close:
        return "<%s %s />" % (name, attrs)
    return "<%s %s>" % (name, attrs)

def serialize(descriptor):
    """
    Returns the textual form of the given Descriptor
    """
    lines = [_element("file", [("duration", _time(descriptor.duration)),
                               ("frame-detection", _bool(descriptor.frame_detection)),
                               ("location", descriptor.location or ""),
                               ("seekable", _bool(descriptor.seekable))])]
    lines.append("  <streams>")
    for stream in descriptor.streams:
        attributes = [("caps", stream.media_type.to_string()),
                      ("id", str(stream.id))]
        if stream.endpoint_name is not None:
            attributes.append(("padname", stream.endpoint_name))
        lines.append("    " + _element("stream", attributes))
        for frame in stream.frames:
            lines.append("      " + _element(
                "frame", [("duration", _time(frame.duration)),
                          ("id", str(frame.id)),
                          ("is-keyframe", _bool(frame.is_keyframe)),
                          ("offset", _time(frame.offset)),
                          ("offset-end", _time(frame.offset_end)),
                          ("timestamp", _time(frame.timestamp))],
                close=True))
        lines.append("    </stream>")
    lines.append("  </streams>")
    for group in descriptor.tag_groups:
        lines.append("  <tags>")
        for tag in group.tags:
            lines.append("    " + _element(
                "tag", [("content", tag.payload.to_string())], close=True))
        lines.append("  </tags>")
    lines.append("</file>")
    return "\n".join(lines) + "\n"


## Deserialization

def _attribute(node, name, required=True):
    value = node.attrib.get(name)
    if value is None and required:
        raise ParseError(node.tag, name, "missing required attribute")
    return value

def _parse_uint(node, name, required=True, default=None):
    value = _attribute(node, name, required)
    if value is None:
        return default
    try:
        res = int(value.strip())
    except ValueError:
        raise ParseError(node.tag, name, "invalid number %r" % value)
    if res < 0:
        raise ParseError(node.tag, name, "negative value %r" % value)
    return res

def _parse_time(node, name, required=True):
    res = _parse_uint(node, name, required)
    if res == CLOCK_TIME_NONE:
        return None
    return res

def _parse_bool(node, name, required=True, default=False):
    res = _parse_uint(node, name, required)
    if res is None:
        return default
    if res not in (0, 1):
        raise ParseError(node.tag, name, "invalid boolean %r" % res)
    return res == 1

def _deserialize_stream(node):
    try:
        caps = Caps.from_string(_attribute(node, "caps"))
    except CapsParseError as e:
        raise ParseError(node.tag, "caps", str(e))
    stream = Stream(_parse_uint(node, "id"), caps,
                    _attribute(node, "padname", required=False))
    for fnode in node.iter("frame"):
        stream.frames.append(
            Frame(_parse_uint(fnode, "id"),
                  offset=_parse_time(fnode, "offset", required=False),
                  offset_end=_parse_time(fnode, "offset-end", required=False),
                  duration=_parse_time(fnode, "duration", required=False),
                  timestamp=_parse_time(fnode, "timestamp", required=False),
                  is_keyframe=_parse_bool(fnode, "is-keyframe", required=False)))
    stream.frames.sort(key=lambda frame: frame.id)
    return stream

def _deserialize_tags(node):
    group = TagGroup()
    for tnode in node.iter("tag"):
        try:
            payload = Structure.from_string(_attribute(tnode, "content"))
        except CapsParseError as e:
            raise ParseError(tnode.tag, "content", str(e))
        group.tags.append(Tag(payload))
    return group

def deserialize(text):
    """
    Returns the Descriptor contained in text.

    Raises ParseError if text is not a valid media descriptor.
    Unknown elements and attributes are ignored.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ParseError("file", "xml", str(e))
    if root.tag != "file":
        raise ParseError(root.tag, "element", "root element should be <file>")
    descriptor = Descriptor(_attribute(root, "location", required=False) or "",
                            duration=_parse_time(root, "duration"),
                            seekable=_parse_bool(root, "seekable"),
                            frame_detection=_parse_bool(root, "frame-detection",
                                                        required=False))
    for streams in root.findall("streams"):
        for snode in streams.findall("stream"):
            descriptor.streams.append(_deserialize_stream(snode))
    for tnode in root.findall("tags"):
        descriptor.tag_groups.append(_deserialize_tags(tnode))
    debug("Parsed %r", descriptor)
    return descriptor

def load(path):
    """
    Reads the Descriptor stored in the file at path
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (IOError, OSError) as e:
        raise ParseError("file", "path", "Could not read %s: %s" % (path, e))
    return deserialize(text)

def save(descriptor, path):
    """
    Writes the Descriptor to path.
    Returns True if it could be written, else False.
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(serialize(descriptor))
    except (IOError, OSError) as e:
        warning("Could not write media descriptor %s: %s", path, e)
        return False
    return True
