import http.client
import io
import threading

import pytest

from horizon_docs.config import ServerConfig
from horizon_docs.server import DocsServer, _StaticHandler


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "build"
    root.mkdir()
    (root / "index.html").write_text("<h1>home</h1>", encoding="utf-8")
    (root / "app.js").write_text("console.log(1)", encoding="utf-8")
    guide = root / "guide"
    guide.mkdir()
    (guide / "index.html").write_text("<h1>guide</h1>", encoding="utf-8")
    return root


@pytest.fixture
def running(site):
    server = DocsServer(ServerConfig(build_dir=site, host="127.0.0.1", port=0))
    httpd = server.bind()
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield server
    server.stop()
    httpd.server_close()
    thread.join(timeout=5)


def _request(server, method, path):
    conn = http.client.HTTPConnection("127.0.0.1", server.port, timeout=5)
    try:
        conn.request(method, path)
        response = conn.getresponse()
        return response.status, dict(response.getheaders()), response.read()
    finally:
        conn.close()


def test_health_for_any_method(running):
    for method in ("GET", "POST", "DELETE", "OPTIONS"):
        status, headers, body = _request(running, method, "/api/health?x=1")
        assert status == 200
        assert headers["Content-Type"] == "application/json"
        assert body == b'{"status":"ok"}'


def test_serves_files_and_indexes(running, site):
    status, headers, body = _request(running, "GET", "/app.js")
    assert status == 200
    assert headers["Content-Type"] == "application/javascript"
    assert headers["Content-Length"] == str(len(body))
    assert body == (site / "app.js").read_bytes()

    status, _, body = _request(running, "GET", "/guide/")
    assert status == 200
    assert body == b"<h1>guide</h1>"


def test_not_found_chain(running, site):
    status, headers, body = _request(running, "GET", "/missing")
    assert status == 404
    assert headers["Content-Type"] == "text/plain"
    assert body == b"Not Found"

    (site / "404.html").write_text("<h1>lost</h1>", encoding="utf-8")
    status, headers, body = _request(running, "PUT", "/missing")
    assert status == 200
    assert headers["Content-Type"] == "text/html"
    assert body == b"<h1>lost</h1>"


def test_nonstandard_methods_use_the_same_chain(running):
    for method in ("PURGE", "PROPFIND", "TRACE"):
        status, headers, body = _request(running, method, "/api/health")
        assert status == 200
        assert headers["Content-Type"] == "application/json"
        assert body == b'{"status":"ok"}'

    status, _, body = _request(running, "PROPFIND", "/guide/")
    assert status == 200
    assert body == b"<h1>guide</h1>"


def test_head_omits_body(running):
    status, headers, body = _request(running, "HEAD", "/index.html")
    assert status == 200
    assert headers["Content-Length"] == str(len(b"<h1>home</h1>"))
    assert body == b""


def test_port_reports_bound_port(site):
    server = DocsServer(ServerConfig(build_dir=site, host="127.0.0.1", port=0))
    assert server.port == 0
    httpd = server.bind()
    try:
        assert server.port == httpd.server_address[1]
        assert server.port != 0
    finally:
        httpd.server_close()


def test_start_prints_single_startup_line(monkeypatch, site, capsys):
    server = DocsServer(ServerConfig(build_dir=site, host="127.0.0.1", port=0))
    httpd = server.bind()

    def interrupted():
        raise KeyboardInterrupt

    closed = []
    monkeypatch.setattr(httpd, "serve_forever", interrupted)
    original_close = httpd.server_close
    monkeypatch.setattr(
        httpd, "server_close", lambda: (closed.append(True), original_close())
    )
    server.start()
    out = capsys.readouterr().out
    assert out == f"Docs server listening on :{server.port}\n"
    assert closed == [True]


def test_stop_without_bind_is_noop(site):
    DocsServer(ServerConfig(build_dir=site)).stop()


def _bare_handler(config, method, path):
    handler = _StaticHandler.__new__(_StaticHandler)
    handler.config = config
    handler.path = path
    handler.command = method
    handler.request_version = "HTTP/1.1"
    handler.wfile = io.BytesIO()
    sent = {"codes": [], "headers": {}}
    handler.send_response = lambda code, message=None: sent["codes"].append(code)
    handler.send_header = lambda key, value: sent["headers"].__setitem__(key, value)
    handler.end_headers = lambda: None
    return handler, sent


def test_handler_writes_resolved_response(site):
    handler, sent = _bare_handler(ServerConfig(build_dir=site), "PATCH", "/")
    handler.handle_any()
    assert sent["codes"] == [200]
    assert sent["headers"]["Content-Type"] == "text/html"
    assert handler.wfile.getvalue() == b"<h1>home</h1>"


def test_access_log_toggle(site, capsys):
    quiet, _ = _bare_handler(ServerConfig(build_dir=site), "GET", "/")
    quiet.log_message("%s", "hello")
    assert capsys.readouterr().err == ""

    loud, _ = _bare_handler(
        ServerConfig(build_dir=site, access_log=True), "GET", "/"
    )
    loud.client_address = ("127.0.0.1", 1234)
    loud.log_message("%s", "hello")
    assert "hello" in capsys.readouterr().err


def test_any_do_method_dispatches_to_chain(site):
    handler, sent = _bare_handler(ServerConfig(build_dir=site), "PURGE", "/app.js")
    assert hasattr(handler, "do_PURGE")
    handler.do_PURGE()
    assert sent["codes"] == [200]
    assert handler.wfile.getvalue() == b"console.log(1)"
    assert not hasattr(handler, "unrelated_attribute")
