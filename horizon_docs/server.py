"""HTTP server for horizon-docs.

Serves the built documentation site:
- Answers every HTTP method through the resolution chain in responder.
- Omits the body for HEAD requests while keeping the headers.
- Keeps quiet per request unless access logging is enabled.

Key classes:
- DocsServer: Binds the listening socket and runs until stopped.
- _StaticHandler: HTTP request handler that delegates to resolve_request.
"""

from __future__ import annotations

import functools
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from .config import ServerConfig
from .responder import Response, resolve_request


class _StaticHandler(BaseHTTPRequestHandler):
    """HTTP request handler bound to a single ServerConfig.

    Attributes:
        config: Settings shared by every request on this server.
    """

    def __init__(self, *args, config: ServerConfig, **kwargs):
        self.config = config
        super().__init__(*args, **kwargs)

    def handle_any(self) -> None:
        response = resolve_request(self.config, self.path)
        self._send(response, include_body=self.command != "HEAD")

    def __getattr__(self, name):
        # Every method, including ones http.server has no do_ handler for.
        if name.startswith("do_"):
            return self.handle_any
        raise AttributeError(name)

    def _send(self, response: Response, include_body: bool = True) -> None:
        self.send_response(response.status)
        self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if include_body:
            self.wfile.write(response.body)

    def log_message(self, format, *args):
        if self.config.access_log:
            super().log_message(format, *args)


class DocsServer:
    """Static server for a pre-built documentation site.

    Attributes:
        config: Resolved server configuration.
        httpd: The bound HTTP server, available after bind().
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self.httpd: ThreadingHTTPServer | None = None

    @property
    def port(self) -> int:
        """Port actually bound, which differs from config.port when it was 0."""
        if self.httpd is None:
            return self.config.port
        return self.httpd.server_address[1]

    def bind(self) -> ThreadingHTTPServer:
        """Create the listening socket.

        Raises:
            OSError: If the address cannot be bound.
        """
        handler = functools.partial(_StaticHandler, config=self.config)
        self.httpd = ThreadingHTTPServer((self.config.host, self.config.port), handler)
        self.httpd.daemon_threads = True
        return self.httpd

    def start(self) -> None:
        """Bind, announce the port, and serve until interrupted."""
        httpd = self.httpd or self.bind()
        print(f"Docs server listening on :{self.port}", flush=True)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            httpd.server_close()

    def stop(self) -> None:
        if self.httpd is not None:
            self.httpd.shutdown()
