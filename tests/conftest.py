import contextlib
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

SLOW_SECONDS = 2.0
DRIP_INTERVAL = 0.3
DRIP_BODY = b"<title>Dripped</title>"

PAGES = {
    "/title": (200, "text/html; charset=utf-8",
               "<html><head><title>\n   Page Title  \n</title></head>"
               "<body><h1>Heading</h1></body></html>"),
    "/h1": (200, "text/html",
            "<html><head></head><body><h1>  Only Heading </h1><h1>Second</h1></body></html>"),
    "/blank-title": (200, "text/html",
                     "<html><head><title>   </title></head><body><h1>Heading Wins</h1></body></html>"),
    "/plain": (200, "TEXT/HTML; charset=UTF-8", "<html><body><p>no headings here</p></body></html>"),
    "/json": (200, "application/json", '{"title": "<title>not html</title>"}'),
    "/missing": (404, "text/html", "<html><head><title>Not Found</title></head></html>"),
    "/error": (500, "text/plain", "boom"),
}


class PagesHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        path = self.path.split("?", 1)[0]
        if path == "/slow":
            time.sleep(SLOW_SECONDS)
            with contextlib.suppress(OSError):
                self._send(200, "text/html", "<title>Too Late</title>")
            return
        if path == "/drip-headers":
            head = ("HTTP/1.1 200 OK\r\nContent-Type: text/html\r\n"
                    f"Content-Length: {len(DRIP_BODY)}\r\n\r\n").encode("ascii")
            self._drip(head + DRIP_BODY)
            return
        if path == "/drip-body":
            self.send_response(200)
            self.send_header("Content-Type", "text/html")
            self.send_header("Content-Length", str(len(DRIP_BODY)))
            self.end_headers()
            self._drip(DRIP_BODY)
            return
        if path == "/truncated":
            self.send_response(200)
            self.send_header("Content-Type", "text/html")
            self.send_header("Content-Length", "1000")
            self.end_headers()
            self.wfile.write(b"<html><head><title>Cut")
            self.close_connection = True
            return
        status, ctype, body = PAGES.get(path, (404, "text/plain", "not found"))
        self._send(status, ctype, body)

    def _drip(self, data):
        # one byte at a time, each well inside any per-read socket timeout
        for i in range(len(data)):
            try:
                self.wfile.write(data[i:i + 1])
            except OSError:
                return
            time.sleep(DRIP_INTERVAL)

    def _send(self, status, ctype, body):
        data = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", ctype)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):
        pass


@pytest.fixture(autouse=True)
def no_proxy(monkeypatch):
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def server():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), PagesHandler)
    httpd.daemon_threads = True
    t = threading.Thread(target=httpd.serve_forever, daemon=True)
    t.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}"
    httpd.shutdown()
    httpd.server_close()


@pytest.fixture
def closed_port_url():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return f"http://127.0.0.1:{port}/"
