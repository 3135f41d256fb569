# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

"""What the server hands out: a directory, a file, or a literal body."""

import os
import stat
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class DirectoryTarget:
    path: str


@dataclass(frozen=True)
class FileTarget:
    path: str

    def read(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()


@dataclass(frozen=True)
class LiteralTarget:
    body: bytes


ServeTarget = Union[DirectoryTarget, FileTarget, LiteralTarget]


def resolve_target(arg: str) -> ServeTarget:
    """Pick the serving mode for the positional argument.

    Anything that is neither a directory nor a regular file, including a
    path that does not exist, is served as the literal argument itself.
    """
    try:
        st = os.stat(arg)
    except (OSError, ValueError):
        return LiteralTarget(os.fsencode(arg))
    if stat.S_ISDIR(st.st_mode):
        return DirectoryTarget(arg)
    if stat.S_ISREG(st.st_mode):
        return FileTarget(arg)
    return LiteralTarget(os.fsencode(arg))
