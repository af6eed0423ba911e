#!/usr/bin/env python3

"""
Host I/O Functionality

Handles reading program binaries from the host filesystem, ready to be handed
to Machine.load_program().  Size checking is left to the machine, so programs
built in memory get exactly the same treatment.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class Loader:
    def load_binary(self, filename):
        with open(filename, "rb") as f:
            return f.read()
