"""Minimal Markdown -> HTML renderer for popover descriptions.

Two passes over the source:

 1. block tokenizer: classifies lines into headings (h3-h6 only; h1/h2 are
    too large for popovers), single-level blockquotes, horizontal rules,
    ordered / unordered lists and paragraphs (blank line = new paragraph,
    single newline = ``<br>``)
 2. inline tokenizer: images, links, inline code, bold, italic, raw tags

Supported inline syntax::

    **bold** __bold__  *italic* _italic_  `code`
    [text](url)  ![alt](src "optional title")

Ambiguous ``&`` (not an entity) and ``<`` (not opening a tag) are escaped;
raw HTML written by the author passes through untouched. Rendering is not
idempotent: feed raw source exactly once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

__all__ = ["render", "parse_blocks", "parse_inline", "escape_ambiguous"]

_AMP_RE = re.compile(r"&(?!#?\w+;)")
_LT_RE = re.compile(r"<(?![/a-zA-Z!])")

_HR_RE = re.compile(r"^(?:[-*_]){3,}\s*$")
_HEADING_RE = re.compile(r"^(#{3,6})\s+(.+)$")
_QUOTE_RE = re.compile(r"^>\s+(.+)$")
_UL_RE = re.compile(r"^[*-]\s+(.+)$")
_OL_RE = re.compile(r"^\d+\.\s+(.+)$")

_IMAGE_RE = re.compile(r'!\[([^\]]*)\]\(([^)\s]+)(?:\s+"([^"]*)")?\)')
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_CODE_RE = re.compile(r"`([^`]+)`")
_STRONG_RE = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
_EM_STAR_RE = re.compile(r"\*(.+?)\*")
_EM_UNDERSCORE_RE = re.compile(r"_(.+?)_")
_TAG_RE = re.compile(r"<!--.*?-->|<![^>]*>|</?[a-zA-Z][^<>]*>", re.DOTALL)


def escape_ambiguous(text: str) -> str:
    return _LT_RE.sub("&lt;", _AMP_RE.sub("&amp;", text))


# Inline nodes -----------------------------------------------------------------


@dataclass
class Text:
    value: str


@dataclass
class RawHtml:
    value: str


@dataclass
class Code:
    value: str


@dataclass
class Strong:
    children: List["Inline"]


@dataclass
class Emphasis:
    children: List["Inline"]


@dataclass
class Link:
    href: str
    children: List["Inline"]


@dataclass
class Image:
    src: str
    alt: str
    title: Optional[str] = None


Inline = Union[Text, RawHtml, Code, Strong, Emphasis, Link, Image]


def _is_word(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


def parse_inline(text: str) -> List[Inline]:
    nodes: List[Inline] = []
    buf: List[str] = []

    def flush() -> None:
        if buf:
            nodes.append(Text("".join(buf)))
            buf.clear()

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        node: Optional[Inline] = None
        end = i
        if ch == "<":
            m = _TAG_RE.match(text, i)
            if m:
                node, end = RawHtml(m.group(0)), m.end()
        elif ch == "!":
            m = _IMAGE_RE.match(text, i)
            if m:
                node, end = Image(src=m.group(2), alt=m.group(1), title=m.group(3)), m.end()
        elif ch == "[":
            m = _LINK_RE.match(text, i)
            if m:
                node, end = Link(href=m.group(2), children=parse_inline(m.group(1))), m.end()
        elif ch == "`":
            m = _CODE_RE.match(text, i)
            if m:
                node, end = Code(m.group(1)), m.end()
        elif ch in "*_":
            m = _STRONG_RE.match(text, i)
            if m:
                node, end = Strong(parse_inline(m.group(1) or m.group(2))), m.end()
            elif ch == "*":
                m = _EM_STAR_RE.match(text, i)
                if m:
                    node, end = Emphasis(parse_inline(m.group(1))), m.end()
            else:
                m = _EM_UNDERSCORE_RE.match(text, i)
                before = text[i - 1] if i > 0 else ""
                if m and not _is_word(before):
                    after = text[m.end()] if m.end() < n else ""
                    if not _is_word(after):
                        node, end = Emphasis(parse_inline(m.group(1))), m.end()
        if node is None:
            buf.append(ch)
            i += 1
            continue
        flush()
        nodes.append(node)
        i = end
    flush()
    return nodes


def _render_inline(nodes: List[Inline]) -> str:
    out: List[str] = []
    for node in nodes:
        if isinstance(node, Text):
            out.append(escape_ambiguous(node.value))
        elif isinstance(node, RawHtml):
            out.append(node.value)
        elif isinstance(node, Code):
            out.append(f"<code>{escape_ambiguous(node.value)}</code>")
        elif isinstance(node, Strong):
            out.append(f"<strong>{_render_inline(node.children)}</strong>")
        elif isinstance(node, Emphasis):
            out.append(f"<em>{_render_inline(node.children)}</em>")
        elif isinstance(node, Link):
            href = escape_ambiguous(node.href)
            out.append(
                f'<a href="{href}" target="_blank" rel="noopener">{_render_inline(node.children)}</a>'
            )
        elif isinstance(node, Image):
            title = f' title="{escape_ambiguous(node.title)}"' if node.title else ""
            out.append(
                f'<img src="{escape_ambiguous(node.src)}" alt="{escape_ambiguous(node.alt)}"{title}'
                ' style="max-width:100%;height:auto;" />'
            )
        else:  # pragma: no cover - exhaustive over Inline
            raise TypeError(f"Unhandled inline node {node!r}")
    return "".join(out)


# Blocks -----------------------------------------------------------------------


@dataclass
class Block:
    kind: str  # paragraph | heading | quote | ul | ol | hr
    lines: List[str] = field(default_factory=list)
    level: int = 0


def _classify(line: str):
    if _HR_RE.match(line):
        return "hr", None
    m = _HEADING_RE.match(line)
    if m:
        return "heading", m
    m = _QUOTE_RE.match(line)
    if m:
        return "quote", m
    m = _UL_RE.match(line)
    if m:
        return "ul", m
    m = _OL_RE.match(line)
    if m:
        return "ol", m
    if not line.strip():
        return "blank", None
    return "paragraph", None


def parse_blocks(text: str) -> List[Block]:
    blocks: List[Block] = []
    current: Optional[Block] = None
    for line in text.split("\n"):
        kind, m = _classify(line)
        if kind == "blank":
            current = None
            continue
        if kind == "hr":
            blocks.append(Block("hr"))
            current = None
            continue
        if kind == "heading":
            blocks.append(Block("heading", [m.group(2)], level=len(m.group(1))))
            current = None
            continue
        content = line if kind == "paragraph" else m.group(1)
        if current is not None and current.kind == kind:
            current.lines.append(content)
        else:
            current = Block(kind, [content])
            blocks.append(current)
    return blocks


def _render_block(block: Block) -> str:
    if block.kind == "hr":
        return "<hr>"
    if block.kind == "heading":
        tag = f"h{block.level}"
        return f"<{tag}>{_render_inline(parse_inline(block.lines[0]))}</{tag}>"
    if block.kind in ("ul", "ol"):
        items = "".join(f"<li>{_render_inline(parse_inline(item))}</li>" for item in block.lines)
        return f"<{block.kind}>{items}</{block.kind}>"
    body = "<br>".join(_render_inline(parse_inline(line)) for line in block.lines)
    if block.kind == "quote":
        return f"<blockquote>{body}</blockquote>"
    return f"<p>{body}</p>"


def render(text: Optional[str], *, sanitize: bool = False) -> str:
    """Render markdown ``text`` to HTML; empty input renders to ``''``.

    With ``sanitize`` the result also passes through
    :func:`onboarding.tour.html_sanitizer.sanitize_html`.
    """
    if not text:
        return ""
    source = re.sub(r"\r\n?", "\n", text)
    html = "".join(_render_block(b) for b in parse_blocks(source)).strip()
    if sanitize:
        from .html_sanitizer import sanitize_html  # local import keeps bs4 off the hot path

        html = sanitize_html(html)
    return html
