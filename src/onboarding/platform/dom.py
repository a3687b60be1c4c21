"""Host document wrapper backed by BeautifulSoup.

The engine never owns the host DOM; it only queries it (CSS selectors via
soupsieve) and injects ``<style>`` elements. The host may swap the markup at
any time with :meth:`HostDocument.replace` when it re-renders, which is why
step targets are resolved lazily.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from bs4 import BeautifulSoup, Tag  # type: ignore
from soupsieve import SelectorSyntaxError  # type: ignore

from onboarding.errors import SelectorResolutionError

_logger = logging.getLogger(__name__)

__all__ = ["HostDocument", "Element"]

Element = Tag


class HostDocument:
    def __init__(self, html: str = "<html><head></head><body></body></html>") -> None:
        self._soup = BeautifulSoup(html, "html.parser")

    @classmethod
    def from_soup(cls, soup: BeautifulSoup) -> "HostDocument":
        doc = cls.__new__(cls)
        doc._soup = soup
        return doc

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    def replace(self, html: str) -> None:
        """Swap the whole document (host re-render)."""
        self._soup = BeautifulSoup(html, "html.parser")

    # Queries ------------------------------------------------------------
    def query_selector(self, selector: str) -> Optional[Element]:
        """Return the first match or None; invalid selectors raise.

        Raises
        ------
        SelectorResolutionError
            If ``selector`` is not valid CSS.
        """
        try:
            return self._soup.select_one(selector)
        except SelectorSyntaxError as e:
            raise SelectorResolutionError(
                f"Invalid selector {selector!r}: {e}", context={"selector": selector}
            ) from e

    def query_selector_all(self, selector: str) -> List[Element]:
        try:
            return list(self._soup.select(selector))
        except SelectorSyntaxError as e:
            raise SelectorResolutionError(
                f"Invalid selector {selector!r}: {e}", context={"selector": selector}
            ) from e

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        return self._soup.find(id=element_id)

    # Mutation -----------------------------------------------------------
    def _head(self) -> Tag:
        head = self._soup.find("head")
        if head is None:
            head = self._soup.new_tag("head")
            root = self._soup.find("html")
            if root is not None:
                root.insert(0, head)
            else:
                self._soup.insert(0, head)
        return head

    def upsert_style(self, css: str, element_id: str, *, replace: bool = True) -> Element:
        """Create ``<style id=element_id>`` in head, or update it when ``replace``."""
        existing = self.get_element_by_id(element_id)
        if existing is not None:
            if replace:
                existing.string = css
            return existing
        style = self._soup.new_tag("style", id=element_id)
        style.string = css
        self._head().append(style)
        _logger.debug("Injected style element #%s", element_id)
        return style

    def __str__(self) -> str:
        return str(self._soup)
