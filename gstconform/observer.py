# GStreamer conformance tests
#
#       observer.py
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
Stream observation

A StreamObserver installs probes on the endpoints of a graph, including
the ones appearing after it was attached, and forwards the traffic going
through them to a callback.
"""

import threading
from collections import deque
from fnmatch import fnmatchcase

from gstconform.log import critical, error, warning, debug, info

class ObserverError(Exception):
    pass


class EndpointSelector:
    """
    Selects endpoints by element and endpoint name patterns (fnmatch
    syntax). None matches everything.

    klass is a list of strings, one of which must be contained in the
    element klass. direction restricts to source or sink endpoints.
    """

    def __init__(self, element=None, endpoint=None, klass=None,
                 direction=None):
        self.element = element
        self.endpoint = endpoint
        self.klass = klass
        self.direction = direction

    def matches(self, node, endpoint):
        if self.direction is not None and endpoint.direction != self.direction:
            return False
        if self.klass is not None and not any(k in (node.klass or "")
                                              for k in self.klass):
            return False
        if self.element is not None and not fnmatchcase(node.name or "",
                                                        self.element):
            return False
        if self.endpoint is not None and not fnmatchcase(endpoint.name or "",
                                                         self.endpoint):
            return False
        return True

    def __repr__(self):
        return "<EndpointSelector %s:%s>" % (self.element or "*",
                                             self.endpoint or "*")


class StreamObserver:
    """
    Use StreamObserver.attach() to create one.

    callback(endpoint, item) is called with every gstconform.events.Buffer
    and gstconform.events.ControlEvent going through the selected
    endpoints, from whatever thread is streaming. Returning False drops the
    item.

    added_callback(container, child), if given, is called whenever a node
    or an endpoint shows up after the observer was attached.
    """

    def __init__(self, selector, callback, added_callback=None):
        self.selector = selector or EndpointSelector()
        self._callback = callback
        self._added_callback = added_callback
        self._cond = threading.Condition(threading.Lock())
        self._active = True
        self._inflight = 0
        # (node, handlerid)
        self._handlers = []
        # (endpoint, probeid)
        self._probes = []
        self._nodes = []

    @classmethod
    def attach(cls, container, selector, callback, added_callback=None):
        """
        Observes all endpoints of container, and of the nodes it contains,
        which match selector.

        Raises ObserverError if container can not be walked.
        """
        if container is None or not container.is_container():
            raise ObserverError("%r is not a container" % (container, ))
        observer = cls(selector, callback, added_callback)
        with observer._cond:
            observer._walk(container)
        debug("Attached %r to %r, %d endpoints", observer, container,
              len(observer._probes))
        return observer

    def _walk(self, node):
        # must be called with the lock taken
        pending = deque([node])
        while pending:
            node = pending.popleft()
            if any(known is node for known in self._nodes):
                continue
            self._nodes.append(node)
            self._handlers.append(
                (node, node.connect_endpoint_added(self._endpointAddedCb)))
            for endpoint in node.endpoints():
                self._watchEndpoint(node, endpoint)
            if node.is_container():
                self._handlers.append(
                    (node, node.connect_child_added(self._childAddedCb)))
                pending.extend(node.children())

    def _watchEndpoint(self, node, endpoint):
        if not self.selector.matches(node, endpoint):
            return
        if any(known is endpoint for known, probeid in self._probes):
            return
        debug("Probing %r", endpoint)
        self._probes.append((endpoint, endpoint.add_probe(self._probeCb)))

    def _childAddedCb(self, container, child):
        debug("New node %r in %r", child, container)
        with self._cond:
            if not self._active:
                return
            self._walk(child)
        if self._added_callback:
            self._added_callback(container, child)

    def _endpointAddedCb(self, node, endpoint):
        debug("New endpoint %r on %r", endpoint, node)
        with self._cond:
            if not self._active:
                return
            self._watchEndpoint(node, endpoint)
        if self._added_callback:
            self._added_callback(node, endpoint)

    def _probeCb(self, endpoint, item):
        with self._cond:
            if not self._active:
                return True
            self._inflight += 1
        try:
            return self._callback(endpoint, item)
        finally:
            with self._cond:
                self._inflight -= 1
                if not self._inflight:
                    self._cond.notify_all()

    def get_endpoints(self):
        """
        Returns the list of endpoints currently observed
        """
        with self._cond:
            return [endpoint for endpoint, probeid in self._probes]

    def is_attached(self):
        with self._cond:
            return self._active

    def detach(self):
        """
        Removes all probes and subscriptions.

        Once this returns the callback will not be called anymore. Can be
        called several times, but never from within the callback.
        """
        with self._cond:
            if not self._active:
                return
            self._active = False
            probes, self._probes = self._probes, []
            handlers, self._handlers = self._handlers, []
            self._nodes = []
            for endpoint, probeid in probes:
                endpoint.remove_probe(probeid)
            for node, handlerid in handlers:
                node.disconnect(handlerid)
            while self._inflight:
                self._cond.wait()
        debug("Detached %r", self)

    def __repr__(self):
        return "<StreamObserver %r>" % (self.selector, )
