# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

"""Directory backed file access, optionally guarded by a deny list.

Names handed to ``open`` are slash separated and rooted at ``/``, the way a
file server sees the URL path, regardless of the platform separator.
"""

import errno
import os
import posixpath
import stat
from typing import BinaryIO, Optional, Protocol

from .deny import DenyList, is_denied


class File:
    """An opened directory entry: a regular file or a directory."""

    def __init__(self, path: str, stat_result: os.stat_result, stream: Optional[BinaryIO] = None):
        self.path = path
        self.stat = stat_result
        self.stream = stream

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.stat.st_mode)

    def close(self):
        if self.stream is not None:
            self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FileSystem(Protocol):
    def open(self, name: str) -> File:
        ...


class DirectoryFileSystem:
    """Serves names relative to ``root``; ``..`` never climbs above it."""

    def __init__(self, root):
        self.root = os.fspath(root)

    def __repr__(self):
        return f"DirectoryFileSystem({self.root!r})"

    def open(self, name: str) -> File:
        if "\x00" in name or (os.sep != "/" and os.sep in name):
            raise FileNotFoundError(errno.ENOENT, "invalid character in file path", name)
        name = posixpath.normpath("/" + name.lstrip("/"))
        parts = [part for part in name.split("/") if part]
        path = os.path.join(self.root, *parts)
        st = os.stat(path)
        if stat.S_ISDIR(st.st_mode):
            return File(path, st)
        return File(path, st, open(path, "rb"))


class GuardedFileSystem:
    """Wraps any ``FileSystem`` and refuses names hit by the deny list.

    A denied name raises PermissionError before the wrapped file system
    is consulted at all.
    """

    def __init__(self, fs: FileSystem, deny_list):
        if isinstance(deny_list, str):
            deny_list = DenyList.parse(deny_list)
        self.fs = fs
        self.deny_list = deny_list

    def __repr__(self):
        return f"GuardedFileSystem({self.fs!r}, {self.deny_list!r})"

    def open(self, name: str) -> File:
        if is_denied(name.replace("/", os.sep), self.deny_list):
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), name)
        return self.fs.open(name)
