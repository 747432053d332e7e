"""Minimal HTML tree for scraping documentation sites.

Built on html.parser.HTMLParser. Supports just enough CSS to locate
elements: descendant selectors made of `tag`, `.class` and `#id` parts.
"""

from __future__ import annotations

import re
from html.parser import HTMLParser
from typing import Iterator, Optional, Union

# Elements that never have content or an end tag
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

_SIMPLE_SELECTOR = re.compile(r"([#.]?)([A-Za-z0-9_-]+)")


class HtmlElement:
    """An element and its children (elements or text)."""

    def __init__(
        self,
        tag: str,
        attrs: Optional[dict[str, str]] = None,
        parent: Optional[HtmlElement] = None,
    ) -> None:
        self.tag = tag
        self.attrs = attrs or {}
        self.parent = parent
        self.children: list[Union[HtmlElement, str]] = []

    def __repr__(self) -> str:
        return f"<HtmlElement {self.tag} {self.attrs}>"

    @property
    def classes(self) -> set[str]:
        return set(self.attrs.get("class", "").split())

    def text(self) -> str:
        """Concatenated text of the element and all its descendants."""
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, str):
                parts.append(child)
            else:
                parts.append(child.text())
        return "".join(parts)

    def iter(self) -> Iterator[HtmlElement]:
        """Yield the descendant elements in document order."""
        for child in self.children:
            if isinstance(child, HtmlElement):
                yield child
                yield from child.iter()

    def matches(
        self,
        tag: Optional[str] = None,
        classes: Optional[set[str]] = None,
        id: Optional[str] = None,
    ) -> bool:
        if tag is not None and self.tag != tag:
            return False
        if classes and not classes <= self.classes:
            return False
        if id is not None and self.attrs.get("id") != id:
            return False
        return True

    def find_all(
        self,
        tag: Optional[str] = None,
        class_: Optional[str] = None,
        id: Optional[str] = None,
    ) -> list[HtmlElement]:
        """Descendants matching a tag, space-separated classes and/or id."""
        classes = set(class_.split()) if class_ else None
        return [el for el in self.iter() if el.matches(tag, classes, id)]

    def find(
        self,
        tag: Optional[str] = None,
        class_: Optional[str] = None,
        id: Optional[str] = None,
    ) -> Optional[HtmlElement]:
        found = self.find_all(tag, class_, id)
        return found[0] if found else None

    def select(self, selector: str) -> list[HtmlElement]:
        """Descendants matching a CSS descendant selector.

        Example: `.detail-container.detail-body-main .highlight pre`
        """
        current = [self]
        for part in selector.split():
            tag, classes, element_id = _parse_simple_selector(part)
            matched: list[HtmlElement] = []
            seen: set[int] = set()
            for scope in current:
                for el in scope.iter():
                    if id(el) not in seen and el.matches(tag, classes, element_id):
                        seen.add(id(el))
                        matched.append(el)
            current = matched
        return current

    def select_one(self, selector: str) -> Optional[HtmlElement]:
        found = self.select(selector)
        return found[0] if found else None

    def next_sibling_element(self) -> Optional[HtmlElement]:
        """The next element with the same parent, skipping text."""
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = next(i for i, child in enumerate(siblings) if child is self)
        for child in siblings[index + 1 :]:
            if isinstance(child, HtmlElement):
                return child
        return None


def _parse_simple_selector(
    part: str,
) -> tuple[Optional[str], set[str], Optional[str]]:
    tag: Optional[str] = None
    classes: set[str] = set()
    element_id: Optional[str] = None
    for prefix, name in _SIMPLE_SELECTOR.findall(part):
        if prefix == ".":
            classes.add(name)
        elif prefix == "#":
            element_id = name
        else:
            tag = name.lower()
    return tag, classes, element_id


class _TreeBuilder(HTMLParser):
    """Build an HtmlElement tree, tolerating unclosed and stray end tags."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = HtmlElement("#document")
        self._current = self.root

    def handle_starttag(self, tag: str, attrs: list[tuple[str, Optional[str]]]) -> None:
        element = HtmlElement(
            tag, {k: v or "" for k, v in attrs}, parent=self._current
        )
        self._current.children.append(element)
        if tag not in VOID_ELEMENTS:
            self._current = element

    def handle_startendtag(
        self, tag: str, attrs: list[tuple[str, Optional[str]]]
    ) -> None:
        element = HtmlElement(
            tag, {k: v or "" for k, v in attrs}, parent=self._current
        )
        self._current.children.append(element)

    def handle_endtag(self, tag: str) -> None:
        node: Optional[HtmlElement] = self._current
        while node is not None and node is not self.root:
            if node.tag == tag:
                self._current = node.parent or self.root
                return
            node = node.parent

    def handle_data(self, data: str) -> None:
        self._current.children.append(data)


def parse_html(html: str) -> HtmlElement:
    """Parse an HTML document into a tree rooted at a `#document` element."""
    builder = _TreeBuilder()
    builder.feed(html)
    builder.close()
    return builder.root
