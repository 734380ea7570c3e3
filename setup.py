#!/usr/bin/env python3

import os
import os.path
import shutil

from setuptools import setup, Command

class clean_custom (Command):

    description = "remove build products and compiled python files"
    user_options = [("dry-run", "n", "don't actually remove anything")]

    def initialize_options (self):
        self.dry_run = False

    def finalize_options (self):
        pass

    def remove_file (self, path):

        if os.path.exists (path):
            print ("removing '%s'" % (path,))
            if not self.dry_run:
                os.unlink (path)

    def remove_directory (self, path):

        if os.path.exists (path):
            print ("removing '%s'" % (path,))
            if not self.dry_run:
                shutil.rmtree (path)

    def run (self):

        if os.path.exists ("MANIFEST.in"):
            # MANIFEST is generated, get rid of it.
            self.remove_file ("MANIFEST")

        self.remove_directory ("build")
        self.remove_directory ("dist")

        for path, dirs, files in os.walk ("."):
            if "__pycache__" in dirs:
                dirs.remove ("__pycache__")
                self.remove_directory (os.path.join (path, "__pycache__"))
            for filename in files:
                if filename.endswith (".pyc") or filename.endswith (".pyo"):
                    file_path = os.path.join (path, filename)
                    self.remove_file (file_path)

cmdclass = {"clean" : clean_custom}

setup (cmdclass = cmdclass,
       packages = ["gstconform"],
       scripts = ["bin/gst-conformance.py"],
       install_requires = ["PyGObject"],
       extras_require = {"test" : ["pytest"]},
       python_requires = ">=3.6",
       name = "gst-conformance",
       version = "0.1",
       description = "Seek and playback conformance tests for GStreamer elements",
       long_description = """\
Plays media files through GStreamer elements and checks that they answer
queries, seek in all the trick-play modes, handle unlinked pads, and
produce the frames, streams and tags recorded in a media descriptor.
""",
       license = "GNU LGPL",
       author = "gst-conformance contributors")
