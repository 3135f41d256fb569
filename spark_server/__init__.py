# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

"""Static HTTP/HTTPS server for a directory, a file or a literal string."""

__license__ = "MIT"
__version__ = "0.1.0"

from .deny import DenyList, is_denied
from .filesystem import DirectoryFileSystem, GuardedFileSystem
from .server import build_handler, main
from .target import DirectoryTarget, FileTarget, LiteralTarget, resolve_target
