"""GzipRequestMiddleware — accept request bodies sent with Content-Encoding: gzip.

The body is inflated before routing, so handlers always read plain bytes.
Content-Encoding is removed and Content-Length rewritten for the inflated body.

  malformed or truncated gzip -> 400
  inflated body over limit    -> 413
"""

import logging
import zlib

from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("lm.request")

_STRIPPED_HEADERS = (b"content-encoding", b"content-length")


class GzipRequestMiddleware:
    def __init__(self, app: ASGIApp, max_body_size: int = 1024 * 1024) -> None:
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        encoding = Headers(scope=scope).get("content-encoding", "")
        if encoding.strip().lower() != "gzip":
            await self.app(scope, receive, send)
            return

        compressed = await _read_body(receive)
        decoder = zlib.decompressobj(wbits=16 + zlib.MAX_WBITS)
        try:
            body = decoder.decompress(compressed, self.max_body_size + 1)
        except zlib.error as exc:
            logger.info("Rejected gzip request body on %s: %s", scope.get("path"), exc)
            await PlainTextResponse("Malformed gzip body", status_code=400)(scope, receive, send)
            return
        if len(body) > self.max_body_size:
            await PlainTextResponse("Request body too large", status_code=413)(scope, receive, send)
            return
        if not decoder.eof:
            await PlainTextResponse("Truncated gzip body", status_code=400)(scope, receive, send)
            return

        headers = [(k, v) for k, v in scope["headers"] if k.lower() not in _STRIPPED_HEADERS]
        headers.append((b"content-length", str(len(body)).encode("latin-1")))
        scope = dict(scope, headers=headers)

        replayed = False

        async def receive_inflated() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, receive_inflated, send)


async def _read_body(receive: Receive) -> bytes:
    chunks: list[bytes] = []
    more_body = True
    while more_body:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunks.append(message.get("body", b""))
        more_body = message.get("more_body", False)
    return b"".join(chunks)
