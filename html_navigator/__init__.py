"""
html_navigator

Lazily parsed, navigable wrappers over (possibly malformed) HTML.
- Node:      one fragment — raw markup, a parsed document, or nothing
- NodeList:  ordered, filterable Nodes from a query or traversal
- Extractors: tables, description lists, images, links, iframes, meta tags

Public API surface:
  Core classes  — Node, NodeList
  Data models   — Image, SrcsetCandidate, Link, Iframe, DescriptionItem
  Error types   — HTMLNavigatorError, DocumentMissingError, EngineError
  Settings      — Settings, get_settings, load_settings
"""

# --- Core wrappers ---
from .node import Node
from .node_list import NodeList

# --- Data models returned by the extractors ---
from .schemas import Image, SrcsetCandidate, Link, Iframe, DescriptionItem

# --- Exceptions ---
from .exceptions import HTMLNavigatorError, DocumentMissingError, EngineError

# --- Settings and logging ---
from .config import Settings, get_settings, load_settings
from .logger import setup_logger

# Package logger, configured once at import time
logger = setup_logger(level=get_settings().log_level_value)

__version__ = "0.1.0"
__all__ = [
    "Node",
    "NodeList",
    "Image",
    "SrcsetCandidate",
    "Link",
    "Iframe",
    "DescriptionItem",
    "HTMLNavigatorError",
    "DocumentMissingError",
    "EngineError",
    "Settings",
    "get_settings",
    "load_settings",
    "setup_logger",
]
