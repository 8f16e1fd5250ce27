"""
One MCP connection drives one shared browser session.

Every tool call goes through the same SessionManager: the browser is started
lazily by the first operation that needs a page, and stays up until the
`close` tool is called or the server exits. There is no per-call browser and
no per-agent window; if two clients need isolated browsers, run two servers.

## How a call flows

    tools/call  ->  Dispatcher.invoke(name, arguments)
                ->  coerce_arguments()    raw JSON -> typed keyword arguments
                ->  operation(**kwargs)   session/cancellation injected
                ->  {"ok": true, "payload": ...} | {"ok": false, "message": ...}

Primitive arguments also accept their string rendition: "800" binds to an
integer parameter and "true" to a boolean one.

## Tip for Debugging

Run the `get_debug_info` tool. It reports the session state, launch count,
engine versions and the memory of the browser processes without launching
anything. Set MCP_PLAYWRIGHT_LOG_LEVEL=DEBUG to see every dispatched call.
"""

__all__ = []
