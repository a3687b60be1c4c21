"""HTML sanitization for rendered popover content.

Markdown rendering lets author-written markup through on purpose. Hosts that
load tours from less trusted sources (imported bundles) can enable
``SANITIZE_POPOVER_HTML`` to run rendered HTML through this BeautifulSoup
pass, which removes:

  - <script>, <style>, <iframe>, <object> and <embed> elements entirely
  - attributes that start with 'on' (event handlers)
  - inline 'style' attributes, except the image sizing style emitted by the
    markdown renderer
  - href/src values using a script-capable scheme (javascript:, vbscript:,
    data:text/html)
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag  # type: ignore

__all__ = ["sanitize_html", "IMAGE_STYLE"]

IMAGE_STYLE = "max-width:100%;height:auto;"

_DROP_ELEMENTS = ("script", "style", "iframe", "object", "embed")
_URL_ATTRS = frozenset({"href", "src"})
_UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:text/html")


def _is_unsafe_url(value) -> bool:
    if isinstance(value, list):
        value = value[0] if value else ""
    return isinstance(value, str) and value.strip().lower().startswith(_UNSAFE_SCHEMES)


def _clean_attrs(tag: Tag) -> None:
    for name in list(tag.attrs):
        low = name.lower()
        if low.startswith("on"):
            del tag.attrs[name]
        elif low == "style":
            if not (tag.name == "img" and tag.attrs[name] == IMAGE_STYLE):
                del tag.attrs[name]
        elif low in _URL_ATTRS and _is_unsafe_url(tag.attrs[name]):
            del tag.attrs[name]


def sanitize_html(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for el in soup.find_all(list(_DROP_ELEMENTS)):
        el.decompose()
    for tag in soup.find_all(True):
        _clean_attrs(tag)
    return str(soup)
