#!/usr/bin/env python3

import sys
from optparse import OptionParser

from gi.repository import GLib

from gstconform.log import initLogging
from gstconform.checklist import LoggingReporter
from gstconform.seektest import SeekModeTest, DemuxerSeekModeTest, \
     DecoderSeekModeTest
from gstconform.utils import SECOND

# argument naming the tested element, per test
ELEMENT_ARGUMENTS = {SeekModeTest : "element",
                     DemuxerSeekModeTest : "demuxer",
                     DecoderSeekModeTest : "decoder-name"}

class CommandLineReporter(LoggingReporter):
    """
    Prints the results and quits the main loop once the test is done
    """

    def __init__(self, mainloop):
        self.mainloop = mainloop
        self.failed = []

    def validate(self, name, passed, message=None):
        LoggingReporter.validate(self, name, passed, message)
        print("%-28s %s %s" % (name, passed and "PASSED" or "FAILED",
                               message or ""))
        if not passed:
            self.failed.append(name)

    def done(self):
        LoggingReporter.done(self)
        self.mainloop.quit()


def run_test(testclass, location, arguments):
    mainloop = GLib.MainLoop()
    reporter = CommandLineReporter(mainloop)
    test = testclass(reporter=reporter, location=location, **arguments)
    print("Testing %s with %s" % (location, testclass.__test_name__))
    GLib.idle_add(test.run)
    mainloop.run()
    return reporter.failed

if __name__ == "__main__":
    parser = OptionParser(usage="%prog [options] FILE...")
    parser.add_option("-d", "--demuxer", dest="testclass",
                      action="store_const", const=DemuxerSeekModeTest,
                      default=SeekModeTest,
                      help="Test the demuxer of the media")
    parser.add_option("-D", "--decoder", dest="testclass",
                      action="store_const", const=DecoderSeekModeTest,
                      help="Test the decoders of the media")
    parser.add_option("-e", "--element", dest="element", default=None,
                      help="Name of the element to test (fnmatch pattern)")
    parser.add_option("-n", "--no-generate", dest="generate",
                      action="store_false", default=True,
                      help="Don't generate missing media descriptors")
    parser.add_option("-m", "--media-descriptor", dest="descriptor",
                      default=None,
                      help="Media descriptor to use (default: FILE.xml)")
    parser.add_option("-s", "--segment-seek", dest="segment_seek",
                      action="store_true", default=None,
                      help="Also test segment seeking")
    parser.add_option("-p", "--playback-duration", dest="playback_duration",
                      type="float", default=None,
                      help="Seconds of playback before validating a phase (default:2)")
    (options, args) = parser.parse_args(sys.argv[1:])
    if not args:
        parser.error("No media file given")
    if options.descriptor and len(args) > 1:
        parser.error("--media-descriptor can only be used with one file")

    initLogging()
    arguments = {"generate-media-descriptor" : options.generate}
    if options.descriptor:
        arguments["media-descriptor"] = options.descriptor
    if options.segment_seek is not None:
        arguments["segment-seek"] = options.segment_seek
    if options.playback_duration is not None:
        arguments["playback-duration"] = int(options.playback_duration * SECOND)
    if options.element:
        arguments[ELEMENT_ARGUMENTS[options.testclass]] = options.element

    failed = 0
    for location in args:
        if run_test(options.testclass, location, arguments):
            failed += 1
    sys.exit(failed and 1 or 0)
