"""
Request body parsers.

Two middlewares read the request body before routing and publish the parsed
value on ``request.state.body``:

* `JSONBodyParser` for ``application/json`` bodies (strict: objects and
  arrays only).
* `URLEncodedBodyParser` for ``application/x-www-form-urlencoded`` bodies,
  with nested bracket keys expanded by `parse_nested_query`.

Every request leaves the parsers with ``request.state.body`` set (``{}`` when
no parser matched). The first parser that consumes a body marks the request
so later parsers skip it. A rejected body is answered directly with a
plain-text error and never reaches the route handler.

GET and HEAD requests are never parsed, whatever body they carry.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from hello_server.config import DEFAULT_BODY_LIMIT, DEFAULT_PARAMETER_LIMIT
from hello_server.exceptions import BodyParseError
from hello_server.observability import get_logger

logger = get_logger(__name__)

__all__ = [
    "BodyParser",
    "JSONBodyParser",
    "URLEncodedBodyParser",
    "parse_nested_query",
]


DEFAULT_ARRAY_LIMIT = 20
DEFAULT_DEPTH = 5
URLENCODED_DEPTH = 32
_SEGMENT = re.compile(r"\[([^\[\]]*)\]")
_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def _content_type(request: Request) -> Tuple[str, Dict[str, str]]:
    """Split the Content-Type header into media type and parameters."""

    header = request.headers.get("content-type", "")
    media, _, raw_params = header.partition(";")
    params: Dict[str, str] = {}
    for item in raw_params.split(";"):
        name, sep, value = item.partition("=")
        if sep:
            params[name.strip().lower()] = value.strip().strip('"')
    return media.strip().lower(), params


def _has_body(request: Request) -> bool:
    return (
        "content-length" in request.headers
        or "transfer-encoding" in request.headers
    )


class BodyParser(BaseHTTPMiddleware):
    """
    Base class for body-parsing middleware.

    Subclasses set `media_type` and implement `parse`. Reading, size limits,
    charset checks and error responses are handled here.
    """

    media_type: str = ""
    default_charset: str = "utf-8"

    def __init__(self, app: Callable, limit: int = DEFAULT_BODY_LIMIT) -> None:
        super().__init__(app)
        self.limit = limit

    def accepts_charset(self, charset: str) -> bool:
        return charset.startswith("utf-")

    def parse(self, raw: bytes, charset: str) -> Any:
        """Decode ``raw``; subclasses must override this.

        Raises:
            BodyParseError: if the body cannot be parsed.
        """
        raise NotImplementedError

    async def dispatch(self, request: Request, call_next: Callable) -> Response:  # type: ignore[override]
        if not hasattr(request.state, "body"):
            request.state.body = {}

        media, params = _content_type(request)
        if (
            request.method in _BODYLESS_METHODS
            or getattr(request.state, "body_parsed", False)
            or media != self.media_type
            or not _has_body(request)
        ):
            return await call_next(request)

        try:
            charset = params.get("charset", self.default_charset).lower()
            if not self.accepts_charset(charset):
                raise BodyParseError(f'unsupported charset "{charset.upper()}"', 415)
            raw = await self._read(request)
            request.state.body = self.parse(raw, charset)
        except BodyParseError as exc:
            logger.debug(
                "body_rejected",
                parser=type(self).__name__,
                status=exc.status_code,
                reason=str(exc),
            )
            return PlainTextResponse(str(exc), status_code=exc.status_code)

        request.state.body_parsed = True
        return await call_next(request)

    async def _read(self, request: Request) -> bytes:
        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.limit:
            raise BodyParseError("request entity too large", 413)

        raw = await request.body()
        if len(raw) > self.limit:
            raise BodyParseError("request entity too large", 413)
        return raw


class JSONBodyParser(BodyParser):
    """Parse ``application/json`` bodies into Python objects."""

    media_type = "application/json"

    def parse(self, raw: bytes, charset: str) -> Any:
        try:
            text = raw.decode(charset)
        except (LookupError, UnicodeDecodeError) as exc:
            raise BodyParseError(f'unsupported charset "{charset.upper()}"', 415) from exc

        if not text:
            return {}

        stripped = text.lstrip(" \t\n\r")
        if stripped[:1] not in ("{", "["):
            raise BodyParseError("JSON body must be an object or array", 400)

        try:
            return json.loads(text, parse_constant=_reject_constant)
        except ValueError as exc:
            raise BodyParseError(f"invalid JSON: {exc}", 400) from exc
        except RecursionError as exc:
            raise BodyParseError("JSON body is nested too deeply", 400) from exc


def _reject_constant(name: str) -> Any:
    raise ValueError(f"unexpected token {name}")


class URLEncodedBodyParser(BodyParser):
    """Parse ``application/x-www-form-urlencoded`` bodies with nested keys."""

    media_type = "application/x-www-form-urlencoded"

    def __init__(
        self,
        app: Callable,
        limit: int = DEFAULT_BODY_LIMIT,
        parameter_limit: int = DEFAULT_PARAMETER_LIMIT,
        depth: int = URLENCODED_DEPTH,
    ) -> None:
        super().__init__(app, limit=limit)
        self.parameter_limit = parameter_limit
        self.depth = depth

    def accepts_charset(self, charset: str) -> bool:
        return charset in {"utf-8", "iso-8859-1"}

    def parse(self, raw: bytes, charset: str) -> Any:
        text = raw.decode(charset, errors="replace")
        if not text:
            return {}

        count = text.count("&") + 1
        if count > self.parameter_limit:
            raise BodyParseError("too many parameters", 413)

        return parse_nested_query(
            text,
            encoding=charset,
            array_limit=max(100, count),
            parameter_limit=self.parameter_limit,
            depth=self.depth,
        )


def parse_nested_query(
    query: str,
    *,
    encoding: str = "utf-8",
    array_limit: int = DEFAULT_ARRAY_LIMIT,
    parameter_limit: int = DEFAULT_PARAMETER_LIMIT,
    depth: int = DEFAULT_DEPTH,
) -> Dict[str, Any]:
    """
    Parse a query string, expanding bracketed keys into nested containers.

    Examples:
        >>> parse_nested_query("a[b][c]=1")
        {'a': {'b': {'c': '1'}}}
        >>> parse_nested_query("a[]=1&a[]=2")
        {'a': ['1', '2']}
        >>> parse_nested_query("a=1&a=2")
        {'a': ['1', '2']}

    Numeric indices up to ``array_limit`` build lists (sparse indices are
    compacted); larger ones become string keys. Pairs past
    ``parameter_limit`` are ignored. At most ``depth`` bracket segments are
    expanded; whatever follows is kept as one literal key:

        >>> parse_nested_query("a[b][c][d]=1", depth=1)
        {'a': {'b': {'[c][d]': '1'}}}
    """

    pairs = parse_qsl(query, keep_blank_values=True, encoding=encoding)
    root: Dict[Any, Any] = {}
    for key, value in pairs[:parameter_limit]:
        if not key:
            continue
        _insert(root, _split_key(key, depth), value, array_limit, top=True)
    return _finalize(root)


def _split_key(key: str, depth: int = DEFAULT_DEPTH) -> List[str]:
    start = key.find("[")
    if start <= 0:
        return [key]

    segments = [key[:start]]
    rest = key[start:]
    pos = 0
    while pos < len(rest):
        match = _SEGMENT.match(rest, pos)
        if match is None or len(segments) > depth:
            segments.append(rest[pos:])
            break
        segments.append(match.group(1))
        pos = match.end()
    return segments


def _next_index(node: Dict[Any, Any]) -> int:
    return max((k for k in node if isinstance(k, int)), default=-1) + 1


def _node_key(node: Dict[Any, Any], segment: str, array_limit: int) -> Any:
    if segment == "":
        return _next_index(node)
    if segment.isascii() and segment.isdigit() and str(int(segment)) == segment:
        index = int(segment)
        if index <= array_limit:
            return index
    return segment


def _is_array(node: Dict[Any, Any]) -> bool:
    return bool(node) and all(isinstance(k, int) for k in node)


def _combine(existing: Any, value: str) -> Any:
    """Merge a repeated leaf value into whatever is already stored."""

    if isinstance(existing, dict):
        if _is_array(existing):
            existing[_next_index(existing)] = value
        else:
            existing[value] = True
        return existing
    return {0: existing, 1: value}


def _insert(
    node: Dict[Any, Any],
    segments: List[str],
    value: str,
    array_limit: int,
    top: bool = False,
) -> None:
    head, rest = segments[0], segments[1:]
    key = head if top else _node_key(node, head, array_limit)

    if not rest:
        node[key] = _combine(node[key], value) if key in node else value
        return

    child: Optional[Any] = node.get(key)
    if child is None:
        child = {}
        node[key] = child
    elif not isinstance(child, dict):
        # A scalar already sits here: keep it and nest beside it.
        nested: Dict[Any, Any] = {}
        node[key] = {0: child, 1: nested}
        child = nested
    _insert(child, rest, value, array_limit)


def _finalize(node: Any) -> Any:
    if not isinstance(node, dict):
        return node
    if _is_array(node):
        return [_finalize(node[k]) for k in sorted(node)]
    return {str(k): _finalize(v) for k, v in node.items()}
