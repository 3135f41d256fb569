# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

"""Request handlers: CORS policy, path prefix, directory and body serving.

Handlers are instantiated per request by ``http.server``; their settings are
bound with ``functools.partial`` in ``spark_server.server``.
"""

import datetime
import email.utils
import http.server
import logging
import posixpath
import urllib.parse
from http import HTTPStatus

from .filesystem import FileSystem

LOG = logging.getLogger(__name__)

CORS_METHODS = ("GET", "POST", "DELETE", "PUT", "PATCH")
CORS_HEADERS = (
    "Accept",
    "Access-Token",
    "Authorization",
    "Content-Type",
    "Version",
    "X-Api-Key",
    "Origin",
    "Recaptcha-Token",
)

BODY_CONTENT_TYPE = "text/html; charset=utf-8"


def strip_prefix(path, prefix):
    """Return what is left of ``path`` under ``prefix``, or None.

    A prefix ending in ``/`` owns its whole subtree, any other prefix only
    matches exactly.
    """
    if prefix.endswith("/"):
        if path.startswith(prefix):
            return path[len(prefix):]
        return None
    return "" if path == prefix else None


class CORSRequestHandler(http.server.BaseHTTPRequestHandler):
    """Adds the CORS headers to every response and answers preflights.

    Requests outside the URL prefix get a 404, preflights included.
    Subclasses implement ``serve(remainder, head)`` for everything else.
    """

    def __init__(self, *args, origin="*", prefix="/", **kwargs):
        self.origin = origin
        self.prefix = prefix
        super().__init__(*args, **kwargs)

    def end_headers(self):
        self.send_header("Access-Control-Allow-Origin", self.origin)
        self.send_header("Access-Control-Allow-Credentials", "true")
        self.send_header("Vary", "Origin")
        super().end_headers()

    def log_message(self, format, *args):
        LOG.debug("%s - %s", self.address_string(), format % args)

    def preflight(self):
        self.send_response(HTTPStatus.NO_CONTENT)
        self.send_header("Access-Control-Allow-Methods", ", ".join(CORS_METHODS))
        self.send_header("Access-Control-Allow-Headers", ", ".join(CORS_HEADERS))
        self.end_headers()

    def do_GET(self):
        self.route(head=False)

    def do_HEAD(self):
        self.route(head=True)

    do_OPTIONS = do_POST = do_PUT = do_PATCH = do_DELETE = do_GET

    def redirect(self, location):
        self.send_response(HTTPStatus.MOVED_PERMANENTLY)
        self.send_header("Location", location)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def route(self, head):
        parts = urllib.parse.urlsplit(self.path)
        path = urllib.parse.unquote(parts.path)
        if self.prefix.endswith("/") and path + "/" == self.prefix:
            self.redirect(urllib.parse.urlunsplit(("", "", parts.path + "/", parts.query, "")))
            return
        remainder = strip_prefix(path, self.prefix)
        if remainder is None:
            self.send_error(HTTPStatus.NOT_FOUND)
            return
        if self.command == "OPTIONS" and "Access-Control-Request-Method" in self.headers:
            self.preflight()
            return
        self.serve(remainder, head)

    def serve(self, remainder, head):
        raise NotImplementedError


class BodyRequestHandler(CORSRequestHandler):
    """Answers every request with the same bytes and status code."""

    def __init__(self, *args, body=b"", status=HTTPStatus.OK, **kwargs):
        self.body = body
        self.status = status
        super().__init__(*args, **kwargs)

    def serve(self, remainder, head):
        # 1xx, 204 and 304 responses carry no body
        bodyless = self.status < 200 or self.status in (HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED)
        self.send_response(self.status)
        self.send_header("Content-Type", BODY_CONTENT_TYPE)
        if not bodyless:
            self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        if not head and not bodyless:
            self.wfile.write(self.body)


class DirectoryRequestHandler(CORSRequestHandler, http.server.SimpleHTTPRequestHandler):
    """Static file serving with every lookup going through ``filesystem``."""

    extensions_map = {
        **http.server.SimpleHTTPRequestHandler.extensions_map,
        ".manifest": "text/cache-manifest",
        ".wgsl": "text/wgsl",
        "": "application/octet-stream",  # Default
    }

    index_pages = ("index.html", "index.htm")

    def __init__(self, *args, filesystem: FileSystem, **kwargs):
        self.filesystem = filesystem
        super().__init__(*args, **kwargs)

    def open_file(self, name):
        try:
            return self.filesystem.open(name)
        except PermissionError:
            self.send_error(HTTPStatus.FORBIDDEN)
        except OSError:
            self.send_error(HTTPStatus.NOT_FOUND)
        return None

    def open_index(self, name):
        for page in self.index_pages:
            try:
                f = self.filesystem.open(posixpath.join(name, page))
            except OSError:
                continue
            if not f.is_dir:
                return f
            f.close()
        return None

    def not_modified(self, st):
        if "If-Modified-Since" not in self.headers or "If-None-Match" in self.headers:
            return False
        try:
            ims = email.utils.parsedate_to_datetime(self.headers["If-Modified-Since"])
        except (TypeError, IndexError, OverflowError, ValueError):
            return False
        if ims.tzinfo is None:
            ims = ims.replace(tzinfo=datetime.timezone.utc)
        if ims.tzinfo is not datetime.timezone.utc:
            return False
        last_modif = datetime.datetime.fromtimestamp(st.st_mtime, datetime.timezone.utc)
        return last_modif.replace(microsecond=0) <= ims

    def serve(self, remainder, head):
        name = posixpath.normpath("/" + remainder)
        f = self.open_file(name)
        if f is None:
            return
        try:
            if f.is_dir:
                if remainder and not remainder.endswith("/"):
                    parts = urllib.parse.urlsplit(self.path)
                    self.redirect(urllib.parse.urlunsplit(("", "", parts.path + "/", parts.query, "")))
                    return
                index = self.open_index(name)
                if index is None:
                    listing = self.list_directory(f.path)
                    if listing is not None:
                        if not head:
                            self.copyfile(listing, self.wfile)
                        listing.close()
                    return
                f.close()
                f = index
            if self.not_modified(f.stat):
                self.send_response(HTTPStatus.NOT_MODIFIED)
                self.end_headers()
                return
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-type", self.guess_type(f.path))
            self.send_header("Content-Length", str(f.stat.st_size))
            self.send_header("Last-Modified", self.date_time_string(f.stat.st_mtime))
            self.end_headers()
            if not head:
                self.copyfile(f.stream, self.wfile)
        finally:
            f.close()
