"""
Pydantic models returned by the structured extractors.

Tables and meta tags are returned as plain lists/dicts; everything with a
fixed set of named fields gets a model here so callers can rely on the shape
(and call .model_dump() when they need plain data).
"""

from typing import Optional
from pydantic import BaseModel, Field


class SrcsetCandidate(BaseModel):
    """One entry of a srcset attribute, e.g. "/img-800.jpg 800w"."""
    src: str
    size: str = ""    # Raw size hint ("800w", "2x"); empty when omitted


class Image(BaseModel):
    """An <img> element reduced to the attributes scrapers care about."""
    src: Optional[str] = None      # src, else data-src, else the largest srcset candidate
    alt: Optional[str] = None
    title: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    srcset: list[SrcsetCandidate] = Field(default_factory=list)


class Link(BaseModel):
    """An anchor's target and its normalized text."""
    href: str
    text: str


class Iframe(BaseModel):
    src: Optional[str] = None


class DescriptionItem(BaseModel):
    """
    A dt/dd pair from a <dl>.

    name is "" when a <dd> shows up without a preceding <dt>; value is ""
    when a <dt> has no <dd> after it.
    """
    name: str = ""
    value: str = ""
