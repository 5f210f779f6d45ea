"""
Document engine: the lxml/libxml2 side of html_navigator.

Everything that touches lxml directly lives here, so Node and NodeList only
see the small contract below:

    parse(markup)                     → Document (lenient, never fails on bad HTML)
    parse_fragment(markup)            → (Document, root is a synthetic container)
    serialize(document | element)     → markup string
    find_by_id(document, id)          → element or None
    find_by_tag_name(target, name)    → elements in document order
    run_path_query(target, xpath)     → elements / text / comments in order
    attributes_of(element)            → [(name, value), ...]
    children_of(element)              → elements / text / comments in order

Tree shape: libxml2 normally wraps fragments in implied <html><body>. We
undo that so a fragment's tree is rooted at the fragment itself (or at a
synthetic <div>/<span> container when the fragment has several top-level
nodes). parse_fragment() reports when that container was added, so
callers can tell it apart from an element the markup really contains.
Full documents keep their <html> root.
"""

import copy
import re
from typing import Union

import lxml.html
from lxml import etree

from .exceptions import EngineError
from .logger import get_module_logger
from .text import first_tag_name

logger = get_module_logger("engine")

Document = etree._ElementTree
Element = etree._Element

# lxml rejects str input that carries an encoding declaration
XML_DECLARATION_PATTERN = re.compile(r'^\s*<\?xml[^>]*\?>', re.IGNORECASE)

# Fragments starting with these are parsed as whole documents
DOCUMENT_LEVEL_TAGS = {'html', 'head', 'body'}

# Tags lxml gives the container it builds around multi-node fragments
SYNTHETIC_CONTAINER_TAGS = {'div', 'span'}

# Log at most this many parser diagnostics per parse call
MAX_REPORTED_DIAGNOSTICS = 10


def _make_parser() -> lxml.html.HTMLParser:
    # A fresh parser per call keeps libxml2's error log scoped to that call
    return lxml.html.HTMLParser(
        recover=True, remove_comments=False, remove_pis=False, default_doctype=False
    )


def _report_diagnostics(parser: lxml.html.HTMLParser) -> None:
    """Log what libxml2 recovered from, then let the error log go."""
    errors = list(parser.error_log)
    if not errors:
        return
    logger.debug(f"libxml2 recovered from {len(errors)} markup errors")
    for entry in errors[:MAX_REPORTED_DIAGNOSTICS]:
        logger.debug(f"  line {entry.line}, column {entry.column}: {entry.message}")


def _detach(root: Element) -> Element:
    """Return root as the top of its own tree (drops implied ancestors)."""
    if root.getparent() is None:
        return root
    detached = copy.deepcopy(root)
    detached.tail = None
    return detached


def _parse_wrapped(markup: str, parser: lxml.html.HTMLParser) -> Element:
    """Last-resort parse: force a <div> container around the markup."""
    try:
        return lxml.html.fragment_fromstring(markup, create_parent='div', parser=parser)
    except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
        raise EngineError(
            f"libxml2 could not build a tree: {e}",
            markup_preview=markup[:80]
        ) from e
    finally:
        _report_diagnostics(parser)


def _is_synthetic_container(root: Element) -> bool:
    # lxml renames the implied <body> to <div>/<span> when a fragment has
    # several top-level nodes; the real fragment's parent would be <body>
    parent = root.getparent()
    return parent is not None and parent.tag == 'html' and root.tag in SYNTHETIC_CONTAINER_TAGS


def parse_fragment(markup: str) -> tuple[Document, bool]:
    """
    Parse markup into a tree, tolerating malformed input.

    Args:
        markup: HTML fragment or document

    Returns:
        (tree, wrapped): the lxml ElementTree rooted at the fragment, and
        whether its root is a synthetic container rather than markup the
        caller wrote

    Raises:
        EngineError: only when even the wrapped fallback cannot be parsed
    """
    markup = XML_DECLARATION_PATTERN.sub('', markup or '', count=1)
    parser = _make_parser()

    try:
        if first_tag_name(markup) in DOCUMENT_LEVEL_TAGS:
            root = lxml.html.document_fromstring(markup, parser=parser)
        else:
            root = lxml.html.fromstring(markup, parser=parser)
    except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
        # Empty, whitespace-only and comment-only input end up here
        _report_diagnostics(parser)
        logger.debug(f"Direct parse failed ({e}), retrying inside a container")
        return _parse_wrapped(markup, parser).getroottree(), True

    _report_diagnostics(parser)
    wrapped = _is_synthetic_container(root)
    return _detach(root).getroottree(), wrapped


def parse(markup: str) -> Document:
    """Parse markup into a tree (see parse_fragment)."""
    document, _ = parse_fragment(markup)
    return document


def empty_document() -> Document:
    """A tree holding a single empty <div>."""
    return lxml.html.Element('div').getroottree()


def serialize(target: Union[Document, Element]) -> str:
    """Outer markup of a tree or element (an element's tail text is excluded)."""
    if isinstance(target, etree._ElementTree):
        return lxml.html.tostring(target, encoding='unicode')
    return lxml.html.tostring(target, encoding='unicode', with_tail=False)


def find_by_id(document: Union[Document, Element], element_id: str):
    """First element whose id attribute equals element_id, or None."""
    matches = document.xpath('//*[@id=$element_id]', element_id=element_id)
    return matches[0] if matches else None


def find_by_tag_name(
    target: Union[Document, Element],
    name: str,
    include_root: bool = True
) -> list:
    """
    All elements named name in document order.

    The top element itself is a candidate unless include_root is False
    (used to skip a synthetic container, see parse_fragment).
    """
    name = name.lower()
    if include_root:
        return list(target.iter(name))
    root = target.getroot() if is_document(target) else target
    return list(root.iterdescendants(name))


def run_path_query(target: Union[Document, Element], expression: str, **variables) -> list:
    """
    Run an XPath expression and always return a list.

    Node-set results come back as-is (elements, comments, text and attribute
    strings). Scalar results (count(), string(), boolean()) are wrapped in a
    one-item list. An invalid expression is logged and treated as no match.
    """
    try:
        result = target.xpath(expression, **variables)
    except etree.XPathError as e:
        logger.warning(f"Invalid XPath '{expression}': {e}")
        return []

    if isinstance(result, list):
        return result
    return [result]


def attributes_of(element: Element) -> list[tuple[str, str]]:
    """Attribute (name, value) pairs in source order."""
    return list(element.attrib.items())


def children_of(element: Element) -> list:
    """Direct child elements, comments and text runs in document order."""
    return element.xpath('node()')


def is_document(item) -> bool:
    return isinstance(item, etree._ElementTree)


def is_tree_node(item) -> bool:
    """Anything lxml stores in a tree: elements, comments, PIs, entities."""
    return isinstance(item, etree._Element)


def is_element(item) -> bool:
    # Comments and processing instructions are _Element subclasses whose
    # tag is a factory function rather than a name
    return isinstance(item, etree._Element) and isinstance(item.tag, str)


def is_comment(item) -> bool:
    return isinstance(item, etree._Comment)


def is_text(item) -> bool:
    return isinstance(item, str)
