# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

"""Startup: choose the handler, then run the plain and TLS listeners."""

import logging
import os
import ssl
import threading
from functools import partial
from http.server import ThreadingHTTPServer
from typing import Optional

from .config import Config, configure_logging, parse_args
from .deny import DenyList
from .filesystem import DirectoryFileSystem, GuardedFileSystem
from .handlers import BodyRequestHandler, DirectoryRequestHandler
from .target import DirectoryTarget, FileTarget, ServeTarget, resolve_target

LOG = logging.getLogger(__name__)


def build_handler(config: Config, target: ServeTarget):
    """Return the request handler factory for ``target``.

    A file target is read here, once; OSError from that read propagates.
    """
    common = {"origin": config.origin, "prefix": config.path}
    if isinstance(target, DirectoryTarget):
        deny_list = DenyList.parse(config.deny)
        if not deny_list:
            LOG.warning("serving files without any filter!")
        filesystem = GuardedFileSystem(DirectoryFileSystem(target.path), deny_list)
        return partial(DirectoryRequestHandler, filesystem=filesystem, **common)
    if isinstance(target, FileTarget):
        body = target.read()
    else:
        body = target.body
    return partial(BodyRequestHandler, body=body, status=config.status, **common)


def make_server(address, handler) -> ThreadingHTTPServer:
    return ThreadingHTTPServer(address, handler)


def make_tls_server(address, handler, certfile, keyfile) -> ThreadingHTTPServer:
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(certfile=certfile, keyfile=keyfile)
    httpd = ThreadingHTTPServer(address, handler)
    try:
        httpd.socket = context.wrap_socket(httpd.socket, server_side=True)
    except ssl.SSLError:
        httpd.server_close()
        raise
    return httpd


def start_tls(config: Config, handler) -> Optional[ThreadingHTTPServer]:
    """Serve HTTPS on a daemon thread if the certificate and key exist.

    Missing key material quietly disables HTTPS. A certificate that does
    not load or a port that cannot be bound is logged and HTTPS stays off;
    plain HTTP is not affected either way.
    """
    for name in (config.cert, config.key):
        if not os.path.exists(name):
            LOG.debug("HTTPS disabled, %s not found", name)
            return None
    try:
        httpd = make_tls_server(config.listen_tls, handler, config.cert, config.key)
    except OSError as err:
        LOG.error("HTTPS listener on %s:%d not started: %s", config.address, config.ssl_port, err)
        return None
    thread = threading.Thread(target=httpd.serve_forever, name="tls-listener", daemon=True)
    thread.start()
    LOG.info("Serving %s on https://%s:%d%s", config.target, config.address,
             httpd.server_address[1], config.path)
    return httpd


def run(config: Config) -> int:
    target = resolve_target(config.target)
    try:
        handler = build_handler(config, target)
    except OSError as err:
        LOG.critical("Error reading file: %s", err)
        return 1

    try:
        httpd = make_server(config.listen, handler)
    except OSError as err:
        LOG.critical("Cannot listen on %s:%d: %s", config.address, config.port, err)
        return 1

    tls_httpd = start_tls(config, handler)
    LOG.info("Serving %s on %s:%d%s...", config.target, config.address,
             httpd.server_address[1], config.path)
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        LOG.info("Server stopped")
    finally:
        httpd.server_close()
        if tls_httpd is not None:
            tls_httpd.shutdown()
            tls_httpd.server_close()
    return 0


def main(argv=None) -> int:
    config = parse_args(argv)
    configure_logging(config.log_level)
    return run(config)
