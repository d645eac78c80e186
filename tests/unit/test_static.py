"""
Unit tests for the static resource responder.
"""

import logging

import pytest

from webserver.errors import ResourceNotFound
from webserver.handlers.static import StaticResponder, FALLBACK_404_BODY


class TestResolve:
    """Tests for mapping request paths into the document root."""

    def test_inside_root(self, static, site):
        assert static.resolve("/index.html") == (site.root / "index.html").resolve()

    def test_nested(self, static, site):
        (site.root / "css").mkdir()
        assert static.resolve("/css/site.css") == (site.root / "css" / "site.css").resolve()

    def test_dotdot_inside_root_allowed(self, static, site):
        (site.root / "css").mkdir()
        assert static.resolve("/css/../index.html") == (site.root / "index.html").resolve()

    @pytest.mark.parametrize("path", [
        "/../serverfiles/404.html",
        "/../../etc/passwd",
        "/css/../../outside.txt",
    ])
    def test_escape_rejected(self, static, path):
        with pytest.raises(ResourceNotFound) as exc_info:
            static.resolve(path)
        assert exc_info.value.reason == "outside document root"

    def test_symlink_out_of_root_rejected(self, static, site, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("secret")
        (site.root / "link.txt").symlink_to(secret)

        with pytest.raises(ResourceNotFound):
            static.resolve("/link.txt")


class TestRespFile:
    """Tests for resp_file()."""

    def test_serves_file(self, static, cache, site, exchange, parse_response):
        raw = exchange(lambda conn: static.resp_file(conn, cache, "/profile.html"), b"GET / HTTP/1.1\r\n\r\n")
        response = parse_response(raw)

        assert response.status_line == "HTTP/1.1 200 OK"
        assert response.header("Content-Type") == "text/html"
        assert response.body == site.profile

    def test_binary_file_exact(self, static, cache, site, exchange, parse_response):
        """Embedded NUL bytes survive and Content-Length counts them."""
        data = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(256))
        (site.root / "logo.png").write_bytes(data)

        raw = exchange(lambda conn: static.resp_file(conn, cache, "/logo.png"), b"GET / HTTP/1.1\r\n\r\n")
        response = parse_response(raw)

        assert response.body == data
        assert response.header("Content-Length") == str(len(data))
        assert response.header("Content-Type") == "image/png"

    def test_unknown_extension(self, static, cache, site, exchange, parse_response):
        (site.root / "data.bin2").write_bytes(b"\x00\x01")

        raw = exchange(lambda conn: static.resp_file(conn, cache, "/data.bin2"), b"GET / HTTP/1.1\r\n\r\n")
        assert parse_response(raw).header("Content-Type") == "application/octet-stream"

    def test_missing_file_is_404(self, static, cache, site, exchange, parse_response):
        """A missing target answers 404 for this connection only."""
        raw = exchange(lambda conn: static.resp_file(conn, cache, "/nope.html"), b"GET / HTTP/1.1\r\n\r\n")
        response = parse_response(raw)

        assert response.status_line == "HTTP/1.1 404 NOT FOUND"
        assert response.body == site.not_found

    def test_directory_is_404(self, static, cache, exchange, parse_response):
        raw = exchange(lambda conn: static.resp_file(conn, cache, "/"), b"GET / HTTP/1.1\r\n\r\n")
        assert parse_response(raw).status_line == "HTTP/1.1 404 NOT FOUND"

    def test_traversal_is_404(self, static, cache, site, exchange, parse_response):
        raw = exchange(
            lambda conn: static.resp_file(conn, cache, "/../serverfiles/404.html"),
            b"GET / HTTP/1.1\r\n\r\n",
        )
        response = parse_response(raw)

        assert response.status_line == "HTTP/1.1 404 NOT FOUND"

    def test_too_large_file_sends_nothing(self, static, cache, site, exchange):
        (site.root / "big.txt").write_bytes(b"x" * 300_000)

        raw = exchange(lambda conn: static.resp_file(conn, cache, "/big.txt"), b"GET / HTTP/1.1\r\n\r\n")
        assert raw == b""


class TestResp404:
    """Tests for resp_404()."""

    def test_serves_404_page(self, static, exchange, parse_response, site):
        raw = exchange(static.resp_404, b"GET / HTTP/1.1\r\n\r\n")
        response = parse_response(raw)

        assert response.status_line == "HTTP/1.1 404 NOT FOUND"
        assert response.header("Content-Type") == "text/html"
        assert response.body == site.not_found

    def test_missing_404_page_falls_back(self, site, exchange, parse_response, caplog):
        """No 404.html: a plain-text body instead of stopping the server."""
        (site.files / "404.html").unlink()
        static = StaticResponder(str(site.root), str(site.files))

        with caplog.at_level(logging.ERROR, logger="webserver"):
            raw = exchange(static.resp_404, b"GET / HTTP/1.1\r\n\r\n")
        response = parse_response(raw)

        assert response.status_line == "HTTP/1.1 404 NOT FOUND"
        assert response.header("Content-Type") == "text/plain"
        assert response.body == FALLBACK_404_BODY
        assert "404.html" in caplog.text


class TestCacheWiring:
    """The cache is only consulted when use_cache is enabled."""

    def test_disabled_bypasses_cache(self, static, cache, exchange):
        exchange(lambda conn: static.resp_file(conn, cache, "/index.html"), b"GET / HTTP/1.1\r\n\r\n")
        assert len(cache) == 0

    def test_enabled_reads_through_cache(self, site, cache, exchange, parse_response):
        static = StaticResponder(str(site.root), str(site.files), use_cache=True)

        first = exchange(lambda conn: static.resp_file(conn, cache, "/index.html"), b"GET / HTTP/1.1\r\n\r\n")
        assert len(cache) == 1
        assert cache.misses == 1

        # Served from memory even after the file changes on disk
        (site.root / "index.html").write_bytes(b"changed")
        second = exchange(lambda conn: static.resp_file(conn, cache, "/index.html"), b"GET / HTTP/1.1\r\n\r\n")

        assert cache.hits == 1
        assert parse_response(second).body == parse_response(first).body

    def test_enabled_without_cache_object(self, site, exchange, parse_response):
        static = StaticResponder(str(site.root), str(site.files), use_cache=True)

        raw = exchange(lambda conn: static.resp_file(conn, None, "/index.html"), b"GET / HTTP/1.1\r\n\r\n")
        assert parse_response(raw).body == site.index

    def test_missing_file_not_cached(self, site, cache, exchange):
        static = StaticResponder(str(site.root), str(site.files), use_cache=True)

        exchange(lambda conn: static.resp_file(conn, cache, "/nope.html"), b"GET / HTTP/1.1\r\n\r\n")
        assert len(cache) == 0
