# GStreamer conformance tests
#
#       log.py
#
# Copyright (c) 2007, Edward Hervey <bilboed@bilboed.com>
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
Logging features

Outputs information on stderr

Set GSTCONFORM_DEBUG env variable to the required level

GSTCONFORM_DEBUG   LEVEL
-------------------------
1               CRITICAL
2               ERROR
3               WARNING
4               INFO
5               DEBUG
"""

from logging import *
import os

__logging_setup__ = False

DEBUG_FORMAT = "%(asctime)s  0x%(thread)x  %(levelname)10s  %(filename)s:%(lineno)d:%(funcName)s: %(message)s"

def getDebugLevel():
    """
    Returns the logging level requested through GSTCONFORM_DEBUG
    """
    levels = [CRITICAL, ERROR, WARNING, INFO, DEBUG]
    value = os.getenv("GSTCONFORM_DEBUG")
    if not value:
        return ERROR
    try:
        level = int(value)
    except ValueError:
        return ERROR
    if level > 0 and level <= 5:
        return levels[level - 1]
    return ERROR

def initLogging():
    """
    Setup the logging system according to environment variables
    """
    global __logging_setup__
    if __logging_setup__ == True:
        info("Logging was already setup, returning")
        return

    basicConfig(level=getDebugLevel(), format=DEBUG_FORMAT)
    info("Logging is now properly setup")
    __logging_setup__ = True
