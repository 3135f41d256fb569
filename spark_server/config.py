# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

"""Command line flags and the immutable configuration built from them."""

import argparse
import logging
from dataclasses import dataclass

DEFAULT_ADDRESS = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_SSL_PORT = 10433
DEFAULT_ORIGIN = "*"
DEFAULT_PATH = "/"
DEFAULT_STATUS = 200
DEFAULT_CERT = "cert.pem"
DEFAULT_KEY = "key.pem"
DEFAULT_TARGET = "."


@dataclass(frozen=True)
class Config:
    address: str = DEFAULT_ADDRESS
    port: int = DEFAULT_PORT
    ssl_port: int = DEFAULT_SSL_PORT
    origin: str = DEFAULT_ORIGIN
    path: str = DEFAULT_PATH
    deny: str = ""
    status: int = DEFAULT_STATUS
    cert: str = DEFAULT_CERT
    key: str = DEFAULT_KEY
    target: str = DEFAULT_TARGET
    log_level: str = "INFO"

    @property
    def listen(self):
        return (self.address, self.port)

    @property
    def listen_tls(self):
        return (self.address, self.ssl_port)


def _port(value):
    port = int(value)
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {value}")
    return port


def _status(value):
    status = int(value)
    if not 100 <= status <= 999:
        raise argparse.ArgumentTypeError(f"invalid HTTP status code: {value}")
    return status


def _url_path(value):
    if not value.startswith("/"):
        raise argparse.ArgumentTypeError(f"URL path must start with '/': {value!r}")
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog="spark-server",
        description="Serve a directory, a file or a literal string over HTTP and HTTPS.",
    )
    parser.add_argument("-address", "--address", default=DEFAULT_ADDRESS, help="Listening address")
    parser.add_argument("-port", "--port", type=_port, default=DEFAULT_PORT, help="Listening port")
    parser.add_argument("-origin", "--origin", default=DEFAULT_ORIGIN, help="CORS Origin")
    parser.add_argument(
        "-sslPort", "--sslPort", "--ssl-port", dest="ssl_port", type=_port,
        default=DEFAULT_SSL_PORT, help="SSL listening port",
    )
    parser.add_argument("-path", "--path", type=_url_path, default=DEFAULT_PATH, help="URL path")
    parser.add_argument(
        "-deny", "--deny", default="",
        help="Sensitive directory or file patterns to be denied when serving directory (comma separated)",
    )
    parser.add_argument("-status", "--status", type=_status, default=DEFAULT_STATUS,
                        help="Returned HTTP status code")
    parser.add_argument("-cert", "--cert", default=DEFAULT_CERT, help="SSL certificate path")
    parser.add_argument("-key", "--key", default=DEFAULT_KEY, help="SSL private key path")
    parser.add_argument(
        "-log-level", "--log-level", dest="log_level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper, help="Logging level (DEBUG shows every request)",
    )
    parser.add_argument(
        "target", nargs="?", default=DEFAULT_TARGET,
        help="Directory, file or literal string to serve (default: current directory)",
    )
    return parser


def parse_args(argv=None) -> Config:
    args = build_parser().parse_args(argv)
    return Config(**vars(args))


def configure_logging(level):
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
