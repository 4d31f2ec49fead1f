"""Web tools: ``web_fetch`` (HTML to text) and ``web_search``.

Both are safe: read-only network access. ``web_search`` prefers the Brave
Search API (``BRAVE_API_KEY``) and falls back to Tavily (``TAVILY_API_KEY``);
without either key it raises a helpful error.
"""

from __future__ import annotations

import json
import os
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from .core import SafetyClass, ToolCall, ToolError, ToolHandler, ToolResult

FETCH_MAX_CHARS = 20_000
"""Hard cap on the text returned by ``web_fetch``."""
SEARCH_DEFAULT_COUNT = 5
SEARCH_MAX_COUNT = 20
BRAVE_ENDPOINT = "https://api.search.brave.com/res/v1/web/search"
TAVILY_ENDPOINT = "https://api.tavily.com/search"
USER_AGENT = "aonyx-agent/0.2"

_BLOCKS_TO_DROP = ("script", "style", "nav", "header", "footer", "aside")
_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
    ("&nbsp;", " "),
)


# ---- pure helpers ----


def looks_like_html(body: str) -> bool:
    """Heuristic: does ``body`` look like HTML without a content type?"""
    head = body.lstrip()[:16].lower()
    return head.startswith("<!doctype") or head.startswith("<html")


def _tag_patterns(tag: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    return (
        re.compile(re.escape(f"<{tag}"), re.IGNORECASE),
        re.compile(re.escape(f"</{tag}>"), re.IGNORECASE),
    )


def first_block_inner(html: str, tag: str) -> str | None:
    """Inner HTML of the first ``<tag ...>...</tag>`` block, case-insensitive.

    Returns ``None`` when the block is absent or unclosed.
    """
    open_re, close_re = _tag_patterns(tag)
    opening = open_re.search(html)
    if opening is None:
        return None
    gt = html.find(">", opening.start())
    if gt < 0:
        return None
    after_open = gt + 1
    closing = close_re.search(html, after_open)
    if closing is None:
        return None
    return html[after_open:closing.start()]


def isolate_main(html: str) -> str:
    """Return the ``<article>`` or ``<main>`` subtree when it has real content.

    Prefers ``<article>``; falls back to the whole document.
    """
    for tag in ("article", "main"):
        inner = first_block_inner(html, tag)
        if inner is not None and len(inner.strip().encode("utf-8")) > 200:
            return inner
    return html


def strip_blocks(html: str, tag: str) -> str:
    """Remove every ``<tag ...>...</tag>`` block, contents included.

    An unclosed block drops the rest of the document.
    """
    open_re, close_re = _tag_patterns(tag)
    parts: list[str] = []
    cursor = 0
    while True:
        opening = open_re.search(html, cursor)
        if opening is None:
            break
        start = opening.start()
        parts.append(html[cursor:start])
        closing = close_re.search(html, start)
        if closing is None:
            cursor = len(html)
            break
        cursor = closing.end()
    parts.append(html[cursor:])
    return "".join(parts)


def decode_entities(s: str) -> str:
    """Decode the handful of HTML entities most common in prose."""
    for entity, char in _ENTITIES:
        s = s.replace(entity, char)
    return s


def collapse_whitespace(s: str) -> str:
    """Squeeze whitespace runs to one space, keeping single blank lines between paragraphs."""
    out: list[str] = []
    last_was_space = False
    newlines = 0
    for c in s:
        if c == "\n":
            newlines = min(newlines + 1, 255)
            last_was_space = True
            continue
        if c.isspace():
            last_was_space = True
            continue
        if newlines >= 2:
            out.append("\n\n")
        elif last_was_space and out:
            out.append(" ")
        newlines = 0
        last_was_space = False
        out.append(c)
    return "".join(out).strip()


def truncate_chars(s: str, max_chars: int) -> str:
    """Cut ``s`` to ``max_chars`` characters, marking the cut when one is made."""
    if len(s) <= max_chars:
        return s
    return f"{s[:max_chars]}\n\n[… truncated at {max_chars} chars]"


def html_to_text(html: str) -> str:
    """Strip HTML to readable text.

    Focuses on the main content, drops scripts, styles and page chrome,
    removes tags, decodes common entities and collapses whitespace.
    """
    text = isolate_main(html)
    for tag in _BLOCKS_TO_DROP:
        text = strip_blocks(text, tag)

    out: list[str] = []
    in_tag = False
    for c in text:
        if c == "<":
            in_tag = True
        elif c == ">":
            in_tag = False
        elif not in_tag:
            out.append(c)
    return collapse_whitespace(decode_entities("".join(out)))


def _str_field(item: Any, key: str) -> str:
    value = item.get(key) if isinstance(item, dict) else None
    return value if isinstance(value, str) else ""


def _triples(results: Any, limit: int, description_key: str) -> list[dict[str, str]]:
    if not isinstance(results, list):
        return []
    return [
        {
            "title": _str_field(item, "title"),
            "url": _str_field(item, "url"),
            "description": _str_field(item, description_key),
        }
        for item in results[:limit]
    ]


def parse_brave_results(payload: Any, limit: int) -> list[dict[str, str]]:
    """Extract ``{title, url, description}`` from a Brave response (``web.results``)."""
    web = payload.get("web") if isinstance(payload, dict) else None
    results = web.get("results") if isinstance(web, dict) else None
    return _triples(results, limit, "description")


def parse_tavily_results(payload: Any, limit: int) -> list[dict[str, str]]:
    """Extract ``{title, url, description}`` from a Tavily response (``results``)."""
    results = payload.get("results") if isinstance(payload, dict) else None
    return _triples(results, limit, "content")


# ---- HTTP plumbing ----


def _decode_body(raw: bytes, charset: str | None) -> str:
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


def _request_json(request: urllib.request.Request, provider: str) -> Any:
    try:
        with urllib.request.urlopen(request) as resp:
            raw = resp.read()
            charset = resp.headers.get_content_charset()
    except urllib.error.HTTPError as exc:
        try:
            txt = _decode_body(exc.read(), exc.headers.get_content_charset())
        except OSError:
            txt = ""
        raise ToolError(
            f"web_search ({provider}): HTTP {exc.code} {exc.reason}: {txt}"
        ) from None
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise ToolError(f"web_search ({provider}) send: {exc}") from exc
    try:
        return json.loads(_decode_body(raw, charset))
    except ValueError as exc:
        raise ToolError(f"web_search ({provider}) json: {exc}") from exc


def _brave_request(key: str, query: str, count: int) -> Any:
    params = urllib.parse.urlencode({"q": query, "count": str(count)})
    request = urllib.request.Request(
        f"{BRAVE_ENDPOINT}?{params}",
        headers={"X-Subscription-Token": key, "Accept": "application/json"},
        method="GET",
    )
    return _request_json(request, "brave")


def _tavily_request(key: str, query: str, count: int) -> Any:
    body = {
        "api_key": key,
        "query": query,
        "max_results": count,
        "search_depth": "basic",
    }
    request = urllib.request.Request(
        TAVILY_ENDPOINT,
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    return _request_json(request, "tavily")


# ---- tools ----


class WebFetch(ToolHandler):
    """``web_fetch`` — GET a URL and return its readable text."""

    name = "web_fetch"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "Absolute http(s) URL to fetch."}
            },
            "required": ["url"],
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        args = call.args
        if not isinstance(args, dict):
            raise ToolError("web_fetch args: expected an object")
        url = args.get("url")
        if not isinstance(url, str):
            raise ToolError("web_fetch args: `url` must be a string")
        if not (url.startswith("http://") or url.startswith("https://")):
            raise ToolError(f"web_fetch: url must be http(s): {url}")

        request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with urllib.request.urlopen(request) as resp:
                status = resp.status
                content_type = resp.headers.get("Content-Type", "")
                charset = resp.headers.get_content_charset()
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            status = exc.code
            content_type = exc.headers.get("Content-Type", "")
            charset = exc.headers.get_content_charset()
            try:
                raw = exc.read()
            except OSError as read_exc:
                raise ToolError(f"web_fetch body: {read_exc}") from read_exc
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise ToolError(f"web_fetch {url}: {exc}") from exc

        body = _decode_body(raw, charset)
        text = html_to_text(body) if "html" in content_type or looks_like_html(body) else body
        return ToolResult(
            call_id=call.id,
            output={
                "url": url,
                "status": status,
                "content_type": content_type,
                "text": truncate_chars(text, FETCH_MAX_CHARS),
            },
        )


class WebSearch(ToolHandler):
    """``web_search`` — Brave search, falling back to Tavily."""

    name = "web_search"

    def classify(self) -> SafetyClass:
        return SafetyClass.SAFE

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string"},
                "count": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": SEARCH_MAX_COUNT,
                    "default": SEARCH_DEFAULT_COUNT,
                },
            },
            "required": ["query"],
        }

    def invoke(self, call: ToolCall) -> ToolResult:
        args = call.args
        if not isinstance(args, dict):
            raise ToolError("web_search args: expected an object")
        query = args.get("query")
        if not isinstance(query, str):
            raise ToolError("web_search args: `query` must be a string")
        count = args.get("count")
        if count is None:
            count = SEARCH_DEFAULT_COUNT
        elif not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise ToolError("web_search args: `count` must be a non-negative integer")
        count = max(1, min(count, SEARCH_MAX_COUNT))

        brave_key = os.environ.get("BRAVE_API_KEY")
        tavily_key = os.environ.get("TAVILY_API_KEY")
        if brave_key is not None:
            provider = "brave"
            results = parse_brave_results(_brave_request(brave_key, query, count), count)
        elif tavily_key is not None:
            provider = "tavily"
            results = parse_tavily_results(_tavily_request(tavily_key, query, count), count)
        else:
            raise ToolError(
                "web_search: set BRAVE_API_KEY or TAVILY_API_KEY to enable search"
            )
        return ToolResult(
            call_id=call.id,
            output={"query": query, "provider": provider, "results": results},
        )