"""
Structured extractors built on Node and NodeList.

Hand-written HTML rarely follows its own grammar: tables mix <th> and <td>,
description lists drop a <dt> here and there, images hide their real source
in data-src or srcset. Each extractor below picks a fixed, documented reading
of such markup instead of failing.

All functions are read-only views of the Node they receive. Node exposes
each of them as a method (node.parse_tables(), node.parse_meta(), ...).
"""

import re
from typing import TYPE_CHECKING, Optional

from . import engine
from .config import get_settings
from .logger import get_module_logger
from .schemas import DescriptionItem, Iframe, Image, Link, SrcsetCandidate
from .text import collapse_whitespace, fix_encoding, is_valid_link

if TYPE_CHECKING:
    from .node import Node

logger = get_module_logger("extractors")

# Leading integer of a dimension attribute ("300", "300px")
DIMENSION_PATTERN = re.compile(r'\s*([0-9]+)')

# Numeric part of a srcset size hint ("800w", "1.5x")
SIZE_PATTERN = re.compile(r'[0-9]+(?:\.[0-9]+)?')

CELL_TAGS = "td|th"


# --- Tables ---

def _owning_table(row):
    """Nearest <table> ancestor of a row."""
    return next(row.iterancestors('table'), None)


def parse_tables(node: "Node") -> list[list[list[str]]]:
    """
    Every <table> as a matrix of cell texts.

    Rows are the <tr> elements that belong to the table itself (rows of a
    nested table go to that table's own matrix). Cells are <td> and <th>
    children in document order, mixed as they appear.
    """
    if node.is_empty():
        return []

    tables = []
    for table in engine.find_by_tag_name(node.get_document(), 'table'):
        rows = []
        for row in engine.find_by_tag_name(table, 'tr'):
            if _owning_table(row) is not table:
                continue
            cells = engine.run_path_query(row, CELL_TAGS)
            rows.append([type(node)(cell).get_text() or '' for cell in cells])
        tables.append(rows)

    logger.debug(f"Parsed {len(tables)} tables")
    return tables


# --- Description lists ---

def _pair_description_list(dl_node: "Node") -> list[DescriptionItem]:
    """
    Pair the dt/dd children of one <dl>.

    A <dt> (re)opens the pair at the current index; a <dd> fills that pair's
    value (creating it with an empty name if no <dt> opened it) and moves on
    to the next index.
    """
    pairs: list[DescriptionItem] = []
    index = 0
    for child in dl_node.get_children().filter_by_tag_name({'dt', 'dd'}):
        text = child.get_text() or ''
        if child.is_tag_name('dt'):
            item = DescriptionItem(name=text, value='')
            if index < len(pairs):
                pairs[index] = item
            else:
                pairs.append(item)
        else:
            if index == len(pairs):
                pairs.append(DescriptionItem(name=''))
            pairs[index].value = text
            index += 1
    return pairs


def parse_description_lists(node: "Node") -> list[DescriptionItem]:
    """name/value pairs of every <dl>, list after list."""
    items = []
    for dl_node in node.get_list_by_tag_name('dl'):
        items.extend(_pair_description_list(dl_node))
    return items


# --- Images ---

def parse_srcset(value: Optional[str]) -> list[SrcsetCandidate]:
    """Split a srcset attribute into (src, size) candidates."""
    candidates = []
    for entry in (value or '').split(','):
        parts = entry.split()
        if not parts:
            continue
        candidates.append(SrcsetCandidate(src=parts[0], size=parts[1] if len(parts) > 1 else ''))
    return candidates


def _size_value(size: str) -> float:
    m = SIZE_PATTERN.search(size)
    return float(m.group(0)) if m else 0.0


def _largest_candidate(candidates: list[SrcsetCandidate]) -> Optional[SrcsetCandidate]:
    if not candidates:
        return None
    # max() keeps the first of equal sizes
    return max(candidates, key=lambda candidate: _size_value(candidate.size))


def _dimension(img_node: "Node", name: str) -> Optional[int]:
    m = DIMENSION_PATTERN.match(img_node.get_attribute(name) or '')
    return int(m.group(1)) if m else None


def _optional_text(value: Optional[str]) -> Optional[str]:
    return fix_encoding(value) if value is not None else None


def _image_from_node(img_node: "Node") -> Image:
    srcset = parse_srcset(img_node.get_attribute('srcset'))

    src = img_node.get_attribute('src') or img_node.get_attribute('data-src')
    if not src:
        largest = _largest_candidate(srcset)
        src = largest.src if largest else None

    return Image(
        src=src,
        alt=_optional_text(img_node.get_attribute('alt')),
        title=_optional_text(img_node.get_attribute('title')),
        width=_dimension(img_node, 'width'),
        height=_dimension(img_node, 'height'),
        srcset=srcset,
    )


def parse_image(node: "Node") -> Optional[Image]:
    """The Node's own <img>, or else its first <img> descendant."""
    img_node = node if node.is_tag_name('img') else node.get_by_tag_name('img')
    if img_node is None:
        return None
    return _image_from_node(img_node)


def parse_images(node: "Node") -> list[Image]:
    return [_image_from_node(img_node) for img_node in node.get_list_by_tag_name('img')]


def get_biggest_image(node: "Node") -> Optional["Node"]:
    """
    The <img> with the largest width × height.

    A missing dimension counts as 1, so sized images beat unsized ones;
    the first image wins a tie.
    """
    biggest = None
    biggest_area = -1
    for img_node in node.get_list_by_tag_name('img'):
        width = _dimension(img_node, 'width')
        height = _dimension(img_node, 'height')
        area = (1 if width is None else width) * (1 if height is None else height)
        if area > biggest_area:
            biggest = img_node
            biggest_area = area
    return biggest


# --- Links ---

def parse_links(node: "Node") -> list[Link]:
    """href and text of every anchor, unfiltered and in document order."""
    links = []
    for anchor in node.get_list_by_tag_name('a'):
        href = (anchor.get_attribute('href') or '').strip()
        links.append(Link(href=href, text=anchor.get_text() or ''))
    return links


def find_links(node: "Node") -> list[str]:
    """
    hrefs that look like crawlable pages (see text.is_valid_link).

    Image links, mailto:, fragments and malformed values are skipped.
    """
    settings = get_settings()
    hrefs = []
    for anchor in node.get_list_by_tag_name('a'):
        href = fix_encoding(anchor.get_attribute('href') or '')
        if is_valid_link(href, settings.link_base_url, settings.ignored_link_extensions):
            hrefs.append(href)
    return hrefs


def get_link_labels(node: "Node") -> list[str]:
    """Non-empty texts of every anchor."""
    return node.get_list_by_tag_name('a').get_texts()


# --- Iframes ---

def parse_iframes(node: "Node") -> list[Iframe]:
    if node.is_tag_name('iframe'):
        return [Iframe(src=node.get_attribute('src'))]
    return [Iframe(src=iframe.get_attribute('src')) for iframe in node.get_list_by_tag_name('iframe')]


# --- Meta tags ---

def parse_meta(node: "Node") -> dict[str, str]:
    """
    content of every <meta>, keyed by name (or property when name is absent).

    The first tag wins when a key repeats.
    """
    meta = {}
    for meta_node in node.get_list_by_tag_name('meta'):
        key = meta_node.get_attribute('name') or meta_node.get_attribute('property')
        if not key or key in meta:
            continue
        meta[key] = meta_node.get_attribute('content') or ''
    return meta


def parse_keywords(node: "Node") -> list[str]:
    keywords = parse_meta(node).get('keywords', '')
    return [keyword.strip() for keyword in keywords.split(',') if keyword.strip()]


# --- Tree dump ---

def _element_to_dict(element) -> dict:
    children = []
    for item in engine.children_of(element):
        if engine.is_element(item):
            children.append(_element_to_dict(item))
        elif engine.is_text(item):
            text = collapse_whitespace(item)
            if text:
                children.append(text)
    return {
        "name": element.tag,
        "attributes": dict(engine.attributes_of(element)),
        "children": children,
    }


def dump_tree(node: "Node") -> Optional[dict]:
    """
    Nested {"name", "attributes", "children"} dicts for the whole subtree.

    Text children appear as plain strings; comments and blank text are
    skipped, as in NodeList.
    """
    root = node.get_root_element()
    if root is None:
        return None
    return _element_to_dict(root)
