# GStreamer conformance tests
#
#       checklist.py
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
Checklist of a test and reporting of its results

Every check item ends up with one verdict: passed, failed or skipped. The
verdicts are handed over to a Reporter, once per item, when the test is
over.
"""

from gstconform.log import critical, error, warning, debug, info

PASS = "pass"
FAIL = "fail"
SKIP = "skip"

class Reporter:
    """
    Receives the results of a test.

    Subclasses should at least implement validate().
    """

    def validate(self, name, passed, message=None):
        raise NotImplementedError

    def extra_info(self, key, value):
        pass

    def done(self):
        pass

    def ping(self):
        """
        Called before operations which might block for a while
        """
        pass


class LoggingReporter(Reporter):
    """
    Reporter writing the results to the log
    """

    def validate(self, name, passed, message=None):
        if passed:
            info("%-28s PASSED %s", name, message or "")
        else:
            warning("%-28s FAILED %s", name, message or "")

    def extra_info(self, key, value):
        info("%-28s %r", key, value)

    def done(self):
        info("Test done")

    def ping(self):
        debug("ping")


class Checklist:
    """
    Verdicts of a set of check items

    items is a dictionnary of check item name => description. Once an item
    failed it stays failed.
    """

    def __init__(self, items):
        self._items = dict(items)
        # name => (verdict, message)
        self._verdicts = {}
        self._flushed = False

    def __contains__(self, name):
        return name in self._items

    def set(self, name, verdict, message=None):
        if not name in self._items:
            warning("Unknown check item %s", name)
            return False
        current = self._verdicts.get(name)
        if current is not None and current[0] == FAIL:
            debug("%s already failed, ignoring %s", name, verdict)
            return False
        self._verdicts[name] = (verdict, message)
        return True

    def get(self, name):
        """
        Returns (verdict, message) for the given item, or None if it was
        not checked yet.
        """
        return self._verdicts.get(name)

    def is_set(self, name):
        return name in self._verdicts

    def has_failed(self, name):
        res = self._verdicts.get(name)
        return res is not None and res[0] == FAIL

    def items(self):
        return sorted(self._items.keys())

    def results(self):
        """
        Returns a dictionnary of name => (verdict, message) for all items,
        the ones never checked being failed.
        """
        res = {}
        for name in self.items():
            if name in self._verdicts:
                res[name] = self._verdicts[name]
            else:
                res[name] = (FAIL, "%s: the test ended before this was checked"
                             % self._items[name])
        return res

    def flush(self, reporter):
        """
        Hands over all verdicts to reporter. Only done once.
        """
        if self._flushed:
            return
        self._flushed = True
        results = self.results()
        for name in self.items():
            verdict, message = results[name]
            if verdict == SKIP:
                reporter.validate(name, True, "Skipped: %s" % (message or ""))
            else:
                reporter.validate(name, verdict == PASS, message)

    def getSuccessPercentage(self):
        results = self.results()
        if not results:
            return 0.0
        nbsucc = len([x for x in results.values() if x[0] != FAIL])
        return (100.0 * nbsucc) / len(results)
