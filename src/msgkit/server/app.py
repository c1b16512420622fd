"""FastAPI render endpoint.

Serves a small HTML form at `/` and renders posted templates at `/render`.
"""

from __future__ import annotations

import html
import json
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from jinja2 import TemplateSyntaxError
from pydantic import BaseModel, Field, ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from msgkit.logger.core import Logger
from msgkit.logger.errors import ConfigurationError
from msgkit.templates.render import TemplateRenderer
from msgkit.templates.usage import UsageTracker

UI_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <title>xprint render page</title>
    <style>
      body { font-family: Calibri, Helvetica, sans-serif; background-color: #303030; color: #e0e0e0; }
      form { display: flex; flex-direction: column; gap: 0.5em; max-width: 48em; margin: auto; }
      textarea { min-height: 8em; }
    </style>
  </head>
  <body>
    <form enctype="multipart/form-data" action="/render" method="POST">
      <textarea name="template" placeholder="main template"></textarea>
      <textarea name="data" placeholder="data (JSON or text)"></textarea>
      <input type="file" name="templates" multiple>
      <input type="submit" value="render">
    </form>
  </body>
</html>
"""

RESULT_PAGE = """<!DOCTYPE html>
<html>
  <head><title>xprint render result</title></head>
  <body><pre>{result}</pre></body>
</html>
"""


class RenderRequest(BaseModel):
    template: Optional[str] = None
    templates: dict[str, str] = Field(default_factory=dict)
    data: Any = None


def _client(request: Request) -> str:
    if request.client is None:
        return "unknown"
    return f"{request.client.host}:{request.client.port}"


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"status": status, "error": message})


def _maybe_json(value: str) -> Any:
    try:
        return json.loads(value)
    except ValueError:
        return value


async def _read_payload(request: Request) -> RenderRequest:
    """JSON body or multipart form. Raises ValueError on malformed input."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        return RenderRequest.model_validate(await request.json())

    form = await request.form()
    templates: dict[str, str] = {}
    for item in form.getlist("templates"):
        if isinstance(item, UploadFile):
            if not item.filename:
                continue
            templates[item.filename] = (await item.read()).decode("utf-8")
    template = form.get("template")
    if isinstance(template, UploadFile):
        template = (await template.read()).decode("utf-8")
    data = form.get("data")
    if isinstance(data, str):
        data = _maybe_json(data) if data else None
    return RenderRequest(template=template or None, templates=templates, data=data)


def create_app(
    logger: Optional[Logger] = None,
    unsafe: bool = False,
    tracker: Optional[UsageTracker] = None,
    debug: bool = False,
) -> FastAPI:
    """Create the render application.

    Args:
        logger: request log destination; the default logger when omitted.
        unsafe: enable helpers that touch the host.
        tracker: report every helper call made while rendering.
        debug: log request headers.
    """
    log = logger or Logger.default()
    renderer = TemplateRenderer(unsafe=unsafe, tracker=tracker)

    app = FastAPI(
        title="xprint",
        description="Template render endpoint",
        docs_url=None,
        redoc_url=None,
    )

    def _arrived(request: Request) -> str:
        client = _client(request)
        log.noticef("new request ( %s %s ) from %s", request.method, request.url.path, client)
        if debug:
            log.debugf(
                "request ( %s %s ) from %s: %s",
                request.method, request.url.path, client, dict(request.headers),
            )
        return client

    @app.get("/", response_class=HTMLResponse)
    async def ui_page(request: Request) -> HTMLResponse:
        _arrived(request)
        return HTMLResponse(UI_PAGE)

    @app.post("/render")
    async def render(request: Request) -> Response:
        client = _arrived(request)
        where = f"( {request.method} {request.url.path} ) from {client}"
        try:
            payload = await _read_payload(request)
        except (ValueError, ValidationError, UnicodeDecodeError) as exc:
            log.errorf("error processing request %s: invalid body: %s", where, exc)
            return _error(400, f"invalid body: {exc}")

        if not payload.template:
            log.infof("request %s: no content", where)
            return Response(status_code=204)

        try:
            result = await run_in_threadpool(
                renderer.render, payload.template, payload.data, payload.templates
            )
        except TemplateSyntaxError as exc:
            log.warningf("error processing request %s: parse: %s", where, exc)
            return _error(400, str(exc))
        except Exception as exc:
            log.warningf("error processing request %s: execute: %s", where, exc)
            return _error(500, str(exc))

        log.infof("processed request %s", where)
        if "text/html" in request.headers.get("accept", ""):
            return HTMLResponse(RESULT_PAGE.format(result=html.escape(result)))
        return PlainTextResponse(result)

    return app


def parse_address(address: str) -> tuple[str, int]:
    """host:port → (host, port). An empty host listens on all interfaces."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigurationError(f"invalid listen address {address!r}, want host:port")
    try:
        return host or "0.0.0.0", int(port)
    except ValueError as exc:
        raise ConfigurationError(f"invalid port in listen address {address!r}") from exc


def serve(
    address: str,
    logger: Optional[Logger] = None,
    unsafe: bool = False,
    tracker: Optional[UsageTracker] = None,
    debug: bool = False,
) -> None:
    """Run the render endpoint until interrupted."""
    host, port = parse_address(address)
    log = logger or Logger.default()
    app = create_app(logger=log, unsafe=unsafe, tracker=tracker, debug=debug)
    log.noticef("serving on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level="debug" if debug else "warning")
