# GStreamer conformance tests
#
#       utils.py
#
# Copyright (c) 2007, Edward Hervey <bilboed@bilboed.com>
# Copyright (c) 2026, gst-conformance contributors
# Copyright (C) 2004 Johan Dahlin <johan at gnome dot org>
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
Miscellaneous utility functions and classes
"""

from random import randint

# All times are expressed in nanoseconds, like GstClockTime
SECOND = 1000000000
MSECOND = SECOND // 1000

# GST_CLOCK_TIME_NONE / GST_BUFFER_OFFSET_NONE as written in descriptor files
CLOCK_TIME_NONE = 2 ** 64 - 1

__uuids = []

def randuuid():
    """
    Generates a random uuid, not guaranteed to be unique.
    """
    return "%032x" % randint(0, 2 ** 128 - 1)

def acquire_uuid():
    """
    Returns a guaranted unique identifier.
    When the user of that UUID is done with it, it should call
    release_uuid(uuid) with that identifier.
    """
    uuid = randuuid()
    while uuid in __uuids:
        uuid = randuuid()
    __uuids.append(uuid)
    return uuid

def release_uuid(uuid):
    """
    Releases the use of a unique identifier.
    """
    if not uuid in __uuids:
        return
    __uuids.remove(uuid)

def time_to_string(value):
    """
    Formats a nanosecond time the way GST_TIME_FORMAT does
    (ex: 0:00:01.000000000).
    """
    if value is None:
        return "CLOCK_TIME_NONE"
    sign = ""
    if value < 0:
        sign = "-"
        value = -value
    return "%s%u:%02u:%02u.%09u" % (sign,
                                     value // (SECOND * 60 * 60),
                                     (value // (SECOND * 60)) % 60,
                                     (value // SECOND) % 60,
                                     value % SECOND)

def seconds_to_string(value):
    """
    Short human readable form of a nanosecond time (ex: 10.5s)
    """
    if value is None:
        return "none"
    return "%gs" % (value / SECOND)
