"""
Node: a lazily materialized wrapper around one fragment of HTML.

A Node is backed by exactly one of:
  - raw markup   — a trimmed string, parsed only when a query needs a tree
  - a document   — an lxml ElementTree, serialized only when markup is needed
  - nothing      — the empty Node (None input, or an unsuccessful lookup)

Wrapping an lxml element serializes it immediately (snapshot semantics): the
new Node owns its markup and never observes later changes to the source tree.

Lookups never raise for "not found" — they return None or an empty NodeList.
The only failure a caller can see is DocumentMissingError from get_markup().

Memoized fields (first tag name, root element, parsed tree) are per instance
and are not guarded by locks; share a Node across threads only after it has
been fully materialized, or serialize access.
"""

import re
from datetime import datetime, timezone
from functools import cached_property
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from . import engine
from . import extractors
from .config import get_settings
from .exceptions import DocumentMissingError, EngineError
from .logger import get_module_logger
from .node_list import NodeList
from .schemas import DescriptionItem, Iframe, Image, Link
from .text import (
    decode_markup,
    digit_runs,
    escape_text,
    first_tag_name,
    leading_number,
    normalize_text,
    remove_layout_characters,
)

logger = get_module_logger("node")

# Pre-filter for class lookups; $class_name is bound as an XPath variable
CLASS_CONTAINS_QUERY = "//*[contains(@class, $class_name)]"

DEFAULT_TIME_OUTPUT_FORMAT = "%Y-%m-%d %H:%M:%S"

DIGITS = "0123456789"


class Node:
    """One HTML fragment with lookup, attribute and extraction helpers."""

    def __init__(self, value=None):
        """
        Args:
            value: markup (str or bytes), an lxml ElementTree (whole document),
                   an lxml element (snapshot), or None for an empty Node
        """
        self._markup: Optional[str] = None
        self._document = None         # tree given at construction
        self._parsed_document = None  # tree built lazily from _markup
        self._synthetic_root = False  # _parsed_document root is lxml's container

        if value is None:
            self._markup = ''
        elif isinstance(value, str):
            self._markup = value.strip()
        elif isinstance(value, bytes):
            self._markup = decode_markup(value).strip()
        elif engine.is_document(value):
            self._document = value
        elif engine.is_tree_node(value):
            self._markup = engine.serialize(value).strip()
        else:
            raise TypeError(f"Cannot build a Node from {type(value).__name__}")

    @classmethod
    def from_text(cls, text: str) -> "Node":
        """
        Node wrapping a text run; the text is HTML-escaped into markup.

        get_text() returns the text with whitespace collapsed. Tag-like runs
        inside it ("x <b> y") are stripped like any other markup.
        """
        return cls(escape_text(text))

    def __str__(self) -> str:
        return self.get_markup()

    def __repr__(self) -> str:
        if self.is_empty():
            return "Node(<empty>)"
        if self._markup is None:
            return "Node(<document>)"
        preview = self._markup if len(self._markup) <= 60 else self._markup[:57] + "..."
        return f"Node({preview!r})"

    # --- Backing forms ---

    def is_empty(self) -> bool:
        """True when there is neither non-blank markup nor a document."""
        return not (self._markup and self._markup.strip()) and self._document is None

    def get_markup(self) -> str:
        """
        Markup of this Node: the cached raw text, or the serialized document.

        Raises:
            DocumentMissingError: if there is no markup and no document
        """
        if self._markup is None:
            if self._document is None:
                raise DocumentMissingError("Node has neither markup nor a document")
            self._markup = engine.serialize(self._document).strip()
        return self._markup

    def get_document(self):
        """
        The lxml tree behind this Node, parsed from the markup on first use.

        Parser diagnostics are logged at DEBUG level and never raised.
        """
        if self._document is not None:
            return self._document
        if self._parsed_document is None:
            try:
                self._parsed_document, self._synthetic_root = engine.parse_fragment(
                    self._markup or ''
                )
            except EngineError as e:
                logger.warning(f"{e.message}; using an empty document")
                self._parsed_document = engine.empty_document()
        return self._parsed_document

    # --- Identity ---

    @cached_property
    def _first_tag_name(self) -> Optional[str]:
        if self.is_empty():
            return None
        return first_tag_name(self.get_markup())

    def get_first_tag_name(self) -> Optional[str]:
        """Name of the first opening tag in the markup (textual scan, no parse)."""
        return self._first_tag_name

    def is_tag_name(self, names: Union[str, Iterable[str]]) -> bool:
        """Compare the first tag name against one name or any of several."""
        tag_name = self.get_first_tag_name()
        if tag_name is None:
            return False
        if isinstance(names, str):
            return tag_name == names.lower()
        return tag_name in {name.lower() for name in names}

    def _find_by_tag_name(self, tag_name: str) -> list:
        document = self.get_document()
        # Never report the container lxml put around a multi-node fragment
        return engine.find_by_tag_name(
            document, tag_name, include_root=not self._synthetic_root
        )

    @cached_property
    def _root_element(self):
        tag_name = self.get_first_tag_name()
        if tag_name is None:
            return None
        # First match anywhere in the tree, not necessarily the top element
        matches = self._find_by_tag_name(tag_name)
        return matches[0] if matches else None

    def get_root_element(self):
        """The lxml element this Node stands for, or None for an empty Node."""
        return self._root_element

    # --- Attributes ---

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        root = self.get_root_element()
        if root is None:
            return default
        return root.get(name, default)

    def get_attribute_names(self) -> list[str]:
        root = self.get_root_element()
        if root is None:
            return []
        return [name for name, _ in engine.attributes_of(root)]

    def get_attributes(self) -> dict[str, str]:
        root = self.get_root_element()
        if root is None:
            return {}
        return dict(engine.attributes_of(root))

    def attribute_exists(self, name: str) -> bool:
        root = self.get_root_element()
        return root is not None and name in root.attrib

    def get_attribute_values(self, name: str) -> list[str]:
        """Whitespace-separated tokens of an attribute, de-duplicated in order."""
        value = self.get_attribute(name) or ''
        return list(dict.fromkeys(value.split()))

    def get_classes(self) -> list[str]:
        """Class names in source order, duplicates and blanks removed."""
        return self.get_attribute_values('class')

    def has_class(self, class_name: str) -> bool:
        return class_name in self.get_classes()

    def get_id(self) -> Optional[str]:
        return self.get_attribute('id')

    # --- Lookups ---

    def get_by_id(self, element_id: str) -> Optional["Node"]:
        if self.is_empty():
            return None
        element = engine.find_by_id(self.get_document(), element_id)
        if element is None:
            return None
        return Node(element)

    def id_exists(self, element_id: str) -> bool:
        if self.is_empty():
            return False
        return engine.find_by_id(self.get_document(), element_id) is not None

    def get_list_by_query(self, query: str, **variables) -> NodeList:
        """
        Run an XPath query against this Node's tree.

        Keyword arguments are bound as XPath variables ($name), which avoids
        quoting problems with user-supplied values.
        """
        if self.is_empty():
            return NodeList()
        return NodeList.from_result_set(
            engine.run_path_query(self.get_document(), query, **variables)
        )

    def get_by_query(self, query: str, **variables) -> Optional["Node"]:
        return self.get_list_by_query(query, **variables).get_first()

    def get_list_by_tag_name(self, tag_name: str) -> NodeList:
        if self.is_empty():
            return NodeList()
        return NodeList.from_result_set(self._find_by_tag_name(tag_name))

    def get_by_tag_name(self, tag_name: str) -> Optional["Node"]:
        return self.get_list_by_tag_name(tag_name).get_first()

    def get_list_by_class(self, class_name: str) -> NodeList:
        """
        Elements carrying class_name as a whole class token.

        Two stages: the XPath contains() pre-filter also matches substrings
        ("foobar" for "foo"), so every candidate is re-checked against its
        own class token list.
        """
        candidates = self.get_list_by_query(CLASS_CONTAINS_QUERY, class_name=class_name)
        return candidates.filter(lambda node: node.has_class(class_name))

    def get_by_class(self, class_name: str) -> Optional["Node"]:
        return self.get_list_by_class(class_name).get_first()

    def class_exists(self, class_name: str) -> bool:
        return not self.get_list_by_class(class_name).is_empty()

    def get_children(self) -> NodeList:
        """Direct children of the root element (comments and blank text dropped)."""
        root = self.get_root_element()
        if root is None:
            return NodeList()
        return NodeList.from_result_set(engine.children_of(root))

    # --- Text ---

    def get_text(self) -> Optional[str]:
        """Plain text: entities decoded, tags stripped, whitespace collapsed."""
        if self.is_empty():
            return None
        return normalize_text(self.get_markup())

    def contains(self, fragment: str) -> bool:
        """Substring test against the markup."""
        if self.is_empty():
            return False
        return fragment in self.get_markup()

    def match(self, pattern: Union[str, re.Pattern]) -> Optional[str]:
        """
        Search the markup with a regular expression.

        Returns the first capture group when the pattern has one (and it
        took part in the match), otherwise the whole match; trimmed.
        """
        if self.is_empty():
            return None
        m = re.search(pattern, self.get_markup())
        if not m:
            return None
        if m.re.groups and m.group(1) is not None:
            return m.group(1).strip()
        return m.group(0).strip()

    def clear(self) -> "Node":
        """New Node with every newline, carriage return and tab removed."""
        if self.is_empty():
            return Node()
        return Node(remove_layout_characters(self.get_markup()))

    # --- Scalars ---

    def parse_int(self) -> Optional[int]:
        """All digit runs of the text joined into one integer ("+36 (30)" → 3630)."""
        runs = digit_runs(self.get_text() or '')
        if not runs:
            return None
        return int(''.join(runs))

    def parse_price(self, decimal_separator: Optional[str] = None) -> float:
        """
        Price from the text: only digits and the decimal separator are kept.

        Any other character (currency, spaces, thousands separators) is
        dropped, so with '.' as separator "1,234.56" becomes 1234.56.
        """
        separator = decimal_separator or get_settings().decimal_separator
        allowed = DIGITS + separator
        kept = ''.join(char for char in (self.get_text() or '') if char in allowed)
        return leading_number(kept.replace(separator, '.'))

    def parse_time(
        self,
        time_format: str,
        tz_name: str,
        output_format: str = DEFAULT_TIME_OUTPUT_FORMAT
    ) -> Optional[str]:
        """
        Read the text as a local time in tz_name and return it in UTC.

        Args:
            time_format: strptime format the whole text must match
            tz_name: IANA zone the text is expressed in (e.g. "Europe/Budapest")
            output_format: strftime format of the result

        Returns:
            Formatted UTC time, or None for empty or non-matching text and
            for an unknown zone name
        """
        text = self.get_text()
        if not text:
            return None
        try:
            local_time = datetime.strptime(text, time_format)
        except ValueError:
            logger.debug(f"Text {text!r} does not match time format {time_format!r}")
            return None
        try:
            zone = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown time zone {tz_name!r}")
            return None
        local_time = local_time.replace(tzinfo=zone)
        return local_time.astimezone(timezone.utc).strftime(output_format)

    # --- Structured extraction ---

    def parse_tables(self) -> list[list[list[str]]]:
        return extractors.parse_tables(self)

    def parse_description_lists(self) -> list[DescriptionItem]:
        return extractors.parse_description_lists(self)

    def parse_image(self) -> Optional[Image]:
        return extractors.parse_image(self)

    def parse_images(self) -> list[Image]:
        return extractors.parse_images(self)

    def get_biggest_image(self) -> Optional["Node"]:
        return extractors.get_biggest_image(self)

    def parse_links(self) -> list[Link]:
        return extractors.parse_links(self)

    def find_links(self) -> list[str]:
        return extractors.find_links(self)

    def get_link_labels(self) -> list[str]:
        return extractors.get_link_labels(self)

    def parse_iframes(self) -> list[Iframe]:
        return extractors.parse_iframes(self)

    def parse_meta(self) -> dict[str, str]:
        return extractors.parse_meta(self)

    def parse_keywords(self) -> list[str]:
        return extractors.parse_keywords(self)

    def to_dict(self) -> Optional[dict]:
        return extractors.dump_tree(self)
