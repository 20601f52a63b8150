"""Rename the file and leave a stray backup next to it."""

import os
import sys


name = sys.argv[-1]
os.rename(name, "renamed-" + name)
open(name + ".bak", "w").close()
