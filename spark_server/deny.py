# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

"""Glob deny list matched against the segments of a path."""

import logging
import os
import re

LOG = logging.getLogger(__name__)


class BadPatternError(ValueError):
    """Raised for a glob pattern that cannot be matched."""


def _class_member(pattern, i, escape):
    n = len(pattern)
    if i >= n:
        raise BadPatternError(f"unterminated character class in {pattern!r}")
    c = pattern[i]
    if c in "-]":
        raise BadPatternError(f"unexpected {c!r} in character class of {pattern!r}")
    if c == "\\" and escape:
        i += 1
        if i >= n:
            raise BadPatternError(f"unterminated character class in {pattern!r}")
        c = pattern[i]
    return c, i + 1


def _class_char(c):
    return c if c.isalnum() else "\\" + c


def _translate_class(pattern, i, escape):
    n = len(pattern)
    negate = i < n and pattern[i] in "^!"
    if negate:
        i += 1
    ranges = []
    count = 0
    while True:
        if i < n and pattern[i] == "]" and count > 0:
            i += 1
            break
        lo, i = _class_member(pattern, i, escape)
        hi = lo
        if i < n and pattern[i] == "-":
            hi, i = _class_member(pattern, i + 1, escape)
        count += 1
        # a reversed range is legal and matches nothing
        if lo <= hi:
            ranges.append(_class_char(lo) if lo == hi else f"{_class_char(lo)}-{_class_char(hi)}")
    if ranges:
        return ("[^%s]" if negate else "[%s]") % "".join(ranges), i
    return ("." if negate else "(?!)"), i


def translate(pattern: str, sep: str = os.sep) -> str:
    """Translate a glob into regex source, following Go's filepath.Match.

    ``*`` and ``?`` never cross ``sep``. Classes are ``[...]``, negated with
    a leading ``^`` or ``!``, holding characters and ``lo-hi`` ranges.
    Backslash escapes the next character, except where it is the path
    separator itself.
    """
    escape = sep != "\\"
    not_sep = "[^%s]" % re.escape(sep)
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c == "*":
            out.append(not_sep + "*")
        elif c == "?":
            out.append(not_sep)
        elif c == "[":
            regex, i = _translate_class(pattern, i, escape)
            out.append(regex)
        elif c == "\\" and escape:
            if i >= n:
                raise BadPatternError(f"trailing backslash in {pattern!r}")
            out.append(re.escape(pattern[i]))
            i += 1
        else:
            out.append(re.escape(c))
    return "(?s:%s)\\Z" % "".join(out)


def compile_pattern(pattern: str, sep: str = os.sep) -> "re.Pattern[str]":
    """Compile a glob into a regex anchored to a whole segment.

    Matching is case-sensitive on every platform. Raises BadPatternError
    for a malformed pattern: a trailing backslash, an unterminated class,
    or a class with a misplaced ``-`` or ``]`` such as ``[]a]`` or ``[a-]``.
    """
    return re.compile(translate(pattern, sep))


class DenyList:
    """Ordered glob patterns parsed from a comma separated string."""

    def __init__(self, patterns=()):
        self.patterns = tuple(patterns)
        self._compiled = []
        for pattern in self.patterns:
            try:
                self._compiled.append(compile_pattern(pattern))
            except BadPatternError as err:
                LOG.warning("error matching file path element: %s", err)

    @classmethod
    def parse(cls, raw: str) -> "DenyList":
        if not raw:
            return cls()
        return cls(element.strip() for element in raw.split(","))

    def __bool__(self):
        return bool(self.patterns)

    def __repr__(self):
        return f"DenyList({list(self.patterns)!r})"

    def matches(self, path: str, sep: str = os.sep) -> bool:
        for segment in path.split(sep):
            # the root and "." are never a deny target, even for "*"
            if segment in ("", "."):
                continue
            for regex in self._compiled:
                if regex.match(segment):
                    return True
        return False


def is_denied(path: str, deny_list) -> bool:
    """Return True if any segment of ``path`` matches a deny pattern.

    ``deny_list`` is either the raw comma separated string or an already
    parsed DenyList. An empty deny list never denies anything.
    """
    if isinstance(deny_list, str):
        deny_list = DenyList.parse(deny_list)
    if not deny_list:
        return False
    return deny_list.matches(path)
