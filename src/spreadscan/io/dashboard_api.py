from __future__ import annotations
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse, HTMLResponse
import asyncio

def make_app(latest_fn, subscribe_fn, stats_fn):
    app = FastAPI()

    @app.get("/health")
    async def health():
        return JSONResponse({"ok": True})

    @app.get("/opps/latest")
    async def latest(limit: int = 50):
        return latest_fn(limit)

    @app.get("/stats")
    async def stats():
        return stats_fn()

    html = """
    <!doctype html><html><body>
    <h2>SPREADSCAN - Live Opportunities</h2>
    <pre id="log"></pre>
    <script>
      const log = document.getElementById('log');
      const ws = new WebSocket(`ws://${location.host}/stream`);
      function line(d){
        return `[${d.timestamp}] ${d.pair}  BUY ${d.buy_exchange} @ ${d.buy_price}  → SELL ${d.sell_exchange} @ ${d.sell_price}  size=${d.max_size}  net=${d.net_profit}  roi=${Number(d.roi_percentage).toFixed(3)}%\\n`;
      }
      ws.onmessage = (ev) => {
        const data = JSON.parse(ev.data);
        log.textContent = line(data) + log.textContent;
      }
    </script>
    </body></html>
    """

    @app.get("/")
    async def root():
        return HTMLResponse(html)

    @app.websocket("/stream")
    async def stream(ws: WebSocket):
        await ws.accept()
        queue: asyncio.Queue = asyncio.Queue(maxsize=100)
        unsub = subscribe_fn(queue)
        try:
            while True:
                data = await queue.get()
                await ws.send_json(data)
        except WebSocketDisconnect:
            pass
        finally:
            unsub()

    return app
