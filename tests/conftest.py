# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

import http.client
import threading

import pytest

from spark_server.server import make_server


@pytest.fixture
def serve():
    """Run a handler on an ephemeral localhost port, return the port."""
    servers = []

    def _serve(handler):
        httpd = make_server(("127.0.0.1", 0), handler)
        threading.Thread(target=httpd.serve_forever, daemon=True).start()
        servers.append(httpd)
        return httpd.server_address[1]

    yield _serve
    for httpd in servers:
        httpd.shutdown()
        httpd.server_close()


@pytest.fixture
def fetch():
    def _fetch(port, path, method="GET", headers=None):
        conn = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
        try:
            conn.request(method, path, headers=headers or {})
            resp = conn.getresponse()
            return resp, resp.read()
        finally:
            conn.close()

    return _fetch


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    (root / "secret").mkdir(parents=True)
    (root / "secret" / "config.txt").write_text("password=hunter2\n")
    (root / "index.html").write_text("<h1>hello</h1>\n")
    (root / "docs").mkdir()
    (root / "docs" / "readme.txt").write_text("read me\n")
    (root / "shader.wgsl").write_text("@compute fn main() {}\n")
    return root
