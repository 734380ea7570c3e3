# GStreamer conformance tests
#
#       graph.py
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
Interface of the graph under test

The conformance tests never talk to a media framework directly, they go
through these classes. gstconform.gstgraph implements them on top of
GStreamer.
"""

class Endpoint:
    """
    A connection point of an element through which buffers and control
    events flow.
    """

    SRC = "src"
    SINK = "sink"

    def __init__(self, name, element_name=None, direction=SRC):
        self.name = name
        self.element_name = element_name
        self.direction = direction

    def get_media_type(self):
        """
        Returns the gstconform.caps.Caps flowing through this endpoint
        """
        raise NotImplementedError

    def add_probe(self, callback):
        """
        Install callback(endpoint, item) to be called for every
        gstconform.events.Buffer and gstconform.events.ControlEvent going
        through this endpoint. item is dropped if callback returns False.

        Returns an identifier to give to remove_probe().
        """
        raise NotImplementedError

    def remove_probe(self, probeid):
        raise NotImplementedError

    def __repr__(self):
        return "<%s %s:%s>" % (self.__class__.__name__,
                               self.element_name, self.name)


class GraphNode:
    """
    An element of the graph. Containers have children.

    klass describes what the element does (ex: "Codec/Demuxer")
    """

    def __init__(self, name, klass=""):
        self.name = name
        self.klass = klass

    def is_container(self):
        return False

    def children(self):
        """
        Returns the list of GraphNode currently contained
        """
        return []

    def endpoints(self):
        """
        Returns the list of Endpoint currently present on this node
        """
        return []

    def connect_child_added(self, callback):
        """
        callback(container, child) will be called whenever a child is
        added to this container.

        Returns a handler identifier to give to disconnect().
        """
        raise NotImplementedError

    def connect_endpoint_added(self, callback):
        """
        callback(node, endpoint) will be called whenever an endpoint is
        created on this node.

        Returns a handler identifier to give to disconnect().
        """
        raise NotImplementedError

    def disconnect(self, handlerid):
        raise NotImplementedError

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.name)


class Graph:
    """
    The media graph under test

    Queries return None when the graph can not answer them, which is
    different from a negative answer.
    """

    def __init__(self, name="graph"):
        self.name = name
        self._notify = None

    def get_root(self):
        """
        Returns the top-level GraphNode
        """
        raise NotImplementedError

    def set_notify_function(self, notify):
        """
        notify(notification) will be called with the graph-wide
        notifications (StateReached, ErrorRaised, EndOfStream, SegmentDone)
        """
        self._notify = notify

    def notify(self, notification):
        if self._notify:
            self._notify(notification)

    def play(self):
        """
        Starts the graph. Returns False if that failed.
        """
        raise NotImplementedError

    def shutdown(self):
        raise NotImplementedError

    def restart(self):
        """
        Flushes the graph back to position zero and plays it again
        """
        raise NotImplementedError

    def discover(self):
        """
        Returns (duration, seekable) of the tested media, independently
        of the graph, or None if that information is not available.
        """
        raise NotImplementedError

    def query_seekable(self):
        raise NotImplementedError

    def query_duration(self):
        raise NotImplementedError

    def query_position(self):
        raise NotImplementedError

    def send_seek(self, rate, start, stop, flags, seqnum):
        """
        Sends a time seek carrying seqnum. stop can be None.
        Returns True if the seek was accepted.
        """
        raise NotImplementedError

    def unlink(self, endpoint):
        """
        Disconnects the downstream side of endpoint.
        Returns True on success.
        """
        raise NotImplementedError
