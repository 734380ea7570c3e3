# GStreamer conformance tests
#
#       test.py
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

import time

from gstconform.log import critical, error, warning, debug, info, exception
from gstconform.checklist import Checklist, LoggingReporter, PASS, FAIL, SKIP
from gstconform import utils

"""
Base Test Class
"""

def default_loop():
    """
    Returns the GLib main loop API
    """
    from gi.repository import GLib
    return GLib


class Test:
    """
    Runs a series of checks

    parameters:
    * reporter : gstconform.checklist.Reporter receiving the results
    * uuid : unique identifier for the test
    * timeout : overrides __test_timeout__ (in seconds)
    * loop : object with the GLib timeout_add/idle_add/source_remove API,
        defaults to GLib
    * clock : function returning the current time in seconds
    * other keyword arguments are the test arguments
    """
    __test_name__ = "test-base-class"
    __test_description__ = """Base class for tests"""
    __test_arguments__ = { }
    __test_checklist__ = {
        "test-started":"The test started",
        "no-timeout":"The test didn't timeout",
        }
    __test_timeout__ = 15
    __test_extra_infos__ = {
        "test-total-duration" : "How long it took to run the entire test (in seconds)"
        }

    def __init__(self, reporter=None, uuid=None, timeout=None, loop=None,
                 clock=None, **kwargs):
        self._timeout = timeout or self.__test_timeout__
        self._running = False
        self._stopping = False
        self.arguments = kwargs
        self.reporter = reporter or LoggingReporter()
        self.loop = loop or default_loop()
        self.clock = clock or time.monotonic

        self._checklist = Checklist(self.getFullCheckList())
        self._extraInfo = {}

        if uuid == None:
            self.uuid = utils.acquire_uuid()
        else:
            self.uuid = uuid

        self._testtimeoutid = 0
        self._teststarttime = 0
        self._testtimeouttime = 0

    def __repr__(self):
        if self.uuid:
            return "< %s uuid:%s >" % (self.__class__.__name__, self.uuid)
        return "< %s id:%x >" % (self.__class__.__name__, id(self))

    def _testTimeoutCb(self):
        debug("timeout for %r", self)
        now = self.clock()
        if now < self._testtimeouttime:
            debug("timeout must have changed in the meantime")
            diff = int((self._testtimeouttime - now) * 1000)
            self._testtimeoutid = self.loop.timeout_add(diff, self._testTimeoutCb)
            return False
        self._testtimeoutid = 0
        self.validateStep("no-timeout", False,
                          "The test didn't finish within %d seconds" % self._timeout)
        self.stop()
        return False

    def run(self):
        # 1. setUp the test
        self._teststarttime = self.clock()
        if not self.setUp():
            error("Something went wrong during setup !")
            self.stop()
            return

        # 2. Start it
        self.start()

    def setUp(self):
        """
        Prepare the test, initialize variables, etc...

        Return True if you setUp didn't encounter any issues, else
        return False.

        If you implement this method, you need to chain up to the
        parent class' setUp() at the BEGINNING of your function without
        forgetting to take into account the return value.
        """
        return True

    def tearDown(self):
        """
        Clear test

        If you implement this method, you need to chain up to the
        parent class' tearDown() at the END of your method.

        Your teardown MUST happen in a synchronous fashion.
        """
        if self._testtimeoutid:
            self.loop.source_remove(self._testtimeoutid)
            self._testtimeoutid = 0

    def stop(self):
        """
        Stop the test
        Can be called by both the test itself AND external elements
        """
        if self._stopping:
            warning("we were already stopping !!!")
            return
        info("STOPPING %r" % self)
        self._stopping = True
        self._running = False
        stoptime = self.clock()
        # if we still have the timeoutid, we didn't timeout
        if self._testtimeoutid:
            self.validateStep("no-timeout")
        self.tearDown()
        self.extraInfo("test-total-duration", stoptime - self._teststarttime)
        self._checklist.flush(self.reporter)
        utils.release_uuid(self.uuid)
        self.reporter.done()

    def start(self):
        """
        Starts the test.
        """
        self._running = True
        self.validateStep("test-started")
        # start timeout for test !
        self._testtimeouttime = self.clock() + self._timeout
        self._testtimeoutid = self.loop.timeout_add(self._timeout * 1000,
                                                    self._testTimeoutCb)
        self.test()

    def test(self):
        """
        This method will be called at the beginning of the test
        """
        raise NotImplementedError

    def isRunning(self):
        return self._running

    def isStopping(self):
        return self._stopping


    ## Methods for tests to return information

    def validateStep(self, checkitem, passed=True, msg=None):
        """
        Validate a step in the checklist.
        checkitem is one of the keys of __test_checklist__

        Called by the test itself
        """
        info("step %s for item %r : %s %s" % (checkitem, self, passed, msg or ""))
        if passed:
            verdict = PASS
        else:
            verdict = FAIL
        self._checklist.set(checkitem, verdict, msg)

    def skipStep(self, checkitem, msg):
        """
        Mark a step of the checklist as skipped, msg explaining why.
        """
        info("skipping %s for item %r : %s" % (checkitem, self, msg))
        self._checklist.set(checkitem, SKIP, msg)

    def extraInfo(self, key, value):
        """
        Give extra information obtained while running the tests.

        If key was already given, the new value will override the value
        previously given for the same key.

        Called by the test itself
        """
        self._extraInfo[key] = value
        self.reporter.extra_info(key, value)

    def ping(self):
        """
        Tell the reporter we are alive, before doing something which
        might take a while
        """
        self.reporter.ping()

    ## Getters/Setters

    @classmethod
    def _mergeClassDicts(cls, attribute):
        d = {}
        for cl in reversed(cls.mro()):
            if attribute in cl.__dict__:
                d.update(cl.__dict__[attribute])
        return d

    @classmethod
    def getFullCheckList(cls):
        """
        Returns the full test checklist. This is used to know all the
        possible check items for this instance, along with their description.
        """
        return cls._mergeClassDicts("__test_checklist__")

    @classmethod
    def getFullArgumentList(cls):
        """
        Returns the full list of arguments with descriptions.
        """
        return cls._mergeClassDicts("__test_arguments__")

    @classmethod
    def getFullExtraInfoList(cls):
        """
        Returns the full list of extra info with descriptions.
        """
        return cls._mergeClassDicts("__test_extra_infos__")

    def getCheckList(self):
        """
        Returns the instance checklist, as a dictionnary of
        item => (verdict, message)
        """
        return self._checklist.results()

    def getArgument(self, name):
        """
        Returns the value of the given argument, or its default value
        """
        if name in self.arguments:
            return self.arguments[name]
        args = self.getFullArgumentList()
        if not name in args:
            raise KeyError("No argument %s for %s" % (name, self.__test_name__))
        return args[name][1]

    def getArguments(self):
        """
        Returns the list of arguments for the given test
        """
        validkeys = self.getFullArgumentList().keys()
        res = {}
        for key in self.arguments.keys():
            if key in validkeys:
                res[key] = self.arguments[key]
        return res

    def getSuccessPercentage(self):
        """
        Returns the success rate of this instance as a float
        """
        return self._checklist.getSuccessPercentage()

    def getExtraInfo(self):
        """
        Returns the extra-information dictionnary
        """
        return self._extraInfo
