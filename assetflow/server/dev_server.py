"""
Static dev server over the output tree with live reload.

Browsers receive a small client script in every HTML page; it keeps a
websocket open and reloads the page when ``DevServer.reload()`` is called.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional, Set

from aiohttp import WSMsgType, web


RELOAD_PATH = "/__assetflow/reload"

RELOAD_CLIENT = """<script>
(function () {
  var url = (location.protocol === "https:" ? "wss://" : "ws://") + location.host + "%(path)s";
  var notify = %(notify)s;
  function connect() {
    var socket = new WebSocket(url);
    socket.onmessage = function (event) {
      if (event.data !== "reload") return;
      if (notify) {
        var note = document.createElement("div");
        note.textContent = "assetflow: reloading";
        note.style.cssText = "position:fixed;top:0;right:0;padding:8px;background:#1b2032;color:#fff;z-index:2147483647";
        document.body.appendChild(note);
      }
      location.reload();
    };
    socket.onclose = function () { setTimeout(connect, 1000); };
  }
  connect();
})();
</script>
"""


class DevServer:
    """Serves ``root_dir`` with ``index_file`` as the default document"""

    def __init__(
        self,
        root_dir: str,
        index_file: str,
        host: str = "localhost",
        port: int = 3000,
        notify: bool = False,
    ):
        self.root_dir = Path(root_dir)
        self.index_file = index_file
        self.host = host
        self.port = port
        self.notify = notify
        self.logger = logging.getLogger(__name__)
        self._clients: Set[web.WebSocketResponse] = set()
        self._pending = set()
        self._runner: Optional[web.AppRunner] = None

    @property
    def client_script(self) -> str:
        return RELOAD_CLIENT % {"path": RELOAD_PATH, "notify": "true" if self.notify else "false"}

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(RELOAD_PATH, self._handle_reload_socket)
        app.router.add_get("/{tail:.*}", self._handle_static)
        return app

    async def start(self) -> None:
        """Start serving; returns once the socket is bound"""
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        self.logger.info(f"Serving {self.root_dir} at http://{self.host}:{self.port}/")

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    def reload(self, *args) -> None:
        """Tell every connected browser to reload; safe to call from watcher callbacks"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.logger.debug("Reload requested outside the event loop; ignored")
            return
        clients = [ws for ws in self._clients if not ws.closed]
        self.logger.debug(f"Reloading {len(clients)} browser(s)")
        for ws in clients:
            send = loop.create_task(ws.send_str("reload"))
            self._pending.add(send)
            send.add_done_callback(self._pending.discard)

    def resolve(self, request_path: str) -> Optional[Path]:
        """
        Map a URL path to a file under the root directory.

        Returns:
            File path, or None when nothing should be served
        """
        relative = request_path.lstrip("/")
        if not relative:
            relative = self.index_file
        root = self.root_dir.resolve()
        candidate = (root / relative).resolve()
        if candidate != root and root not in candidate.parents:
            return None
        if candidate.is_dir():
            candidate = candidate / "index.html"
        if not candidate.is_file():
            return None
        return candidate

    async def _handle_static(self, request: web.Request) -> web.StreamResponse:
        path = self.resolve(request.path)
        if path is None:
            raise web.HTTPNotFound()

        if path.suffix.lower() in (".html", ".htm"):
            html = path.read_text(encoding="utf-8", errors="replace")
            return web.Response(text=self.inject_client(html), content_type="text/html")

        return web.FileResponse(path)

    def inject_client(self, html: str) -> str:
        marker = html.lower().rfind("</body>")
        if marker == -1:
            return html + self.client_script
        return html[:marker] + self.client_script + html[marker:]

    async def _handle_reload_socket(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self._clients.add(ws)
        try:
            async for message in ws:
                if message.type == WSMsgType.ERROR:
                    self.logger.debug(f"Reload socket closed with error: {ws.exception()}")
        finally:
            self._clients.discard(ws)
        return ws
