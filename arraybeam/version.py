# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import inspect
from pathlib import Path

import numpy as np

from . import __version__


def history_string(notes=""):
    """
    Header for the text files written by arraybeam, naming the function and module
    that produced the file. Optionally add notes.

    The result has no comment characters; numpy.savetxt prefixes every line with '# '.
    """
    # inspect.stack()[1] is the frame of the caller: [1] its file, [3] its function name
    caller = inspect.stack()[1]
    lines = [
        "------------",
        "Produced by {}() in {} using arraybeam {} (numpy {}).".format(
            caller[3], Path(caller[1]).name, __version__, np.__version__),
    ]
    if notes:
        lines += ["Notes:"] + notes.strip("\n").splitlines()
    lines.append("------------")
    return "\n".join(lines)
