"""
=============================================================================
WEBSERVER - A SINGLE-THREADED STATIC HTTP/1.1 SERVER
=============================================================================

A deliberately small web server on raw sockets:

    accept() → recv() once → parse "METHOD PATH" → pick a file → send → close

=============================================================================
ARCHITECTURE
=============================================================================

    webserver/
    ├── __main__.py          CLI: python -m webserver
    ├── server.py            WebServer: wires everything, supervises the loop
    ├── config.py            ServerConfig, fixed buffer sizes
    ├── errors.py            WebServerError and friends
    │
    ├── core/
    │   ├── socket_server.py Listening socket, sequential accept loop
    │   └── connection.py    One accepted client: one recv, one send, close
    │
    ├── http/
    │   ├── request.py       Request line → ParsedRequest(method, path)
    │   ├── router.py        GET / POST / 404 dispatch
    │   ├── response.py      Response serializer (bare \\n, 256 KiB ceiling)
    │   └── mime_types.py    Extension → Content-Type
    │
    ├── handlers/
    │   └── static.py        resp_file() / resp_404()
    │
    └── resources/
        ├── files.py         load_file() → FilePayload | ResourceNotFound
        └── cache.py         Bounded LRU/FIFO path → payload cache

=============================================================================
QUICK START
=============================================================================

    from webserver import WebServer, ServerConfig

    server = WebServer(ServerConfig(port=3490))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import WebServer

__all__ = ["WebServer", "ServerConfig", "__version__"]
