# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

import pytest

from spark_server.deny import DenyList
from spark_server.filesystem import DirectoryFileSystem, GuardedFileSystem


class SpyFileSystem:
    def __init__(self, error=None):
        self.calls = []
        self.error = error
        self.opened = object()

    def open(self, name):
        self.calls.append(name)
        if self.error is not None:
            raise self.error
        return self.opened


def test_denied_name_never_reaches_wrapped_filesystem():
    spy = SpyFileSystem()
    fs = GuardedFileSystem(spy, "secret, *.pem")
    for name in ("/secret", "/secret/config.txt", "/certs/key.pem"):
        with pytest.raises(PermissionError):
            fs.open(name)
    assert spy.calls == []


def test_allowed_name_is_delegated_unchanged():
    spy = SpyFileSystem()
    fs = GuardedFileSystem(spy, DenyList.parse("secret"))
    assert fs.open("/public/index.html") is spy.opened
    assert spy.calls == ["/public/index.html"]


def test_wrapped_error_is_passed_through():
    error = FileNotFoundError(2, "No such file or directory", "/missing")
    spy = SpyFileSystem(error=error)
    fs = GuardedFileSystem(spy, "secret")
    with pytest.raises(FileNotFoundError) as excinfo:
        fs.open("/missing")
    assert excinfo.value is error


def test_empty_deny_list_allows_everything():
    spy = SpyFileSystem()
    fs = GuardedFileSystem(spy, "")
    fs.open("/secret/config.txt")
    assert spy.calls == ["/secret/config.txt"]


def test_directory_filesystem_opens_files_and_directories(site):
    fs = DirectoryFileSystem(site)
    with fs.open("/index.html") as f:
        assert not f.is_dir
        assert f.stream.read() == b"<h1>hello</h1>\n"
        assert f.stat.st_size == len(b"<h1>hello</h1>\n")
    with fs.open("/docs") as d:
        assert d.is_dir
        assert d.stream is None
    with fs.open("/") as root:
        assert root.is_dir


def test_directory_filesystem_stays_under_root(tmp_path, site):
    (tmp_path / "outside.txt").write_text("nope")
    fs = DirectoryFileSystem(site)
    with pytest.raises(FileNotFoundError):
        fs.open("/../outside.txt")
    with pytest.raises(FileNotFoundError):
        fs.open("/docs/../../outside.txt")


def test_directory_filesystem_missing_name(site):
    with pytest.raises(FileNotFoundError):
        DirectoryFileSystem(site).open("/nothing/here")


def test_guard_over_directory_filesystem(site):
    fs = GuardedFileSystem(DirectoryFileSystem(site), "secret")
    with pytest.raises(PermissionError):
        fs.open("/secret/config.txt")
    with fs.open("/docs/readme.txt") as f:
        assert f.stream.read() == b"read me\n"
