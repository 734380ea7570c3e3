# GStreamer conformance tests
#
#       caps.py
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
Structures and caps of the media descriptors

Media types of streams and tag payloads are Gst.Caps and Gst.Structure,
stored in media descriptors in their string form:

  video/x-raw, format=(string)I420, width=(int)320, framerate=(fraction)25/1

The wrappers below only give them value semantics (== uses
gst_caps_is_equal() / gst_structure_is_equal()) so they can be stored in
the descriptor model.
"""

import gi
gi.require_version("Gst", "1.0")
from gi.repository import Gst

Gst.init(None)

class CapsParseError(ValueError):
    pass


class Structure:
    """
    A Gst.Structure, used for tag payloads
    """

    def __init__(self, structure):
        self.structure = structure

    @classmethod
    def from_string(cls, text):
        structure = None
        # tag lists print with a trailing semicolon
        stripped = (text or "").strip().rstrip(";")
        if stripped:
            structure = Gst.Structure.new_from_string(stripped)
        if structure is None:
            raise CapsParseError("Invalid structure %r" % (text, ))
        return cls(structure)

    @property
    def name(self):
        return self.structure.get_name()

    def remove_field(self, name):
        self.structure.remove_field(name)

    def has_field(self, name):
        return self.structure.has_field(name)

    def field_names(self):
        return [self.structure.nth_field_name(i)
                for i in range(self.structure.n_fields())]

    def get_value(self, name):
        if not self.structure.has_field(name):
            return None
        return self.structure.get_value(name)

    def copy(self):
        return Structure(self.structure.copy())

    def to_string(self):
        return self.structure.to_string()

    def __eq__(self, other):
        if not isinstance(other, Structure):
            return NotImplemented
        return self.structure.is_equal(other.structure)

    def __hash__(self):
        return hash(self.name)

    def __len__(self):
        return self.structure.n_fields()

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return "<Structure %s>" % self.to_string()


class Caps:
    """
    A Gst.Caps, used for the media type of streams
    """

    def __init__(self, caps):
        self.caps = caps

    @classmethod
    def from_string(cls, text):
        if text is None:
            raise CapsParseError("No caps")
        if text.strip() in ("", "NONE"):
            return cls(Gst.Caps.new_empty())
        caps = Gst.Caps.from_string(text.strip())
        if caps is None:
            raise CapsParseError("Invalid caps %r" % (text, ))
        return cls(caps)

    @property
    def structures(self):
        return [Structure(self.caps.get_structure(i).copy())
                for i in range(self.caps.get_size())]

    def is_any(self):
        return self.caps.is_any()

    def is_empty(self):
        return self.caps.is_empty()

    def to_string(self):
        return self.caps.to_string()

    def __eq__(self, other):
        if not isinstance(other, Caps):
            return NotImplemented
        return self.caps.is_equal(other.caps)

    def __hash__(self):
        return hash(frozenset(s.name for s in self.structures))

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return "<Caps %s>" % self.to_string()
