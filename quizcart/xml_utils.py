"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

xml_utils.py - XML parsing and namespace-agnostic element helpers.

SECURITY: All parsing goes through defusedxml to protect against XXE and
entity expansion attacks.
"""

from __future__ import annotations

from typing import List, Optional, Union
from xml.etree import ElementTree as ET

# SECURITY: Use defusedxml to protect against XXE attacks
from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

# Errors raised for malformed or hostile documents
XML_ERRORS = (ET.ParseError, DefusedXmlException, ValueError)


def parse_xml(data: Union[bytes, str]) -> ET.Element:
    """Parse a document and return its root element. Raises one of XML_ERRORS."""
    return DefusedET.fromstring(data)


def local_name(elem: ET.Element) -> str:
    """Tag without its {namespace} prefix."""
    tag = elem.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def qualified(tag: str, ns: str) -> str:
    return f"{{{ns}}}{tag}" if ns else tag


def child(elem: Optional[ET.Element], tag: str) -> Optional[ET.Element]:
    """First direct child with local name `tag`, in any namespace."""
    if elem is None:
        return None
    for sub in elem:
        if local_name(sub) == tag:
            return sub
    return None


def children(elem: Optional[ET.Element], tag: str) -> List[ET.Element]:
    """All direct children with local name `tag`, in document order."""
    if elem is None:
        return []
    return [sub for sub in elem if local_name(sub) == tag]


def child_path(elem: Optional[ET.Element], *tags: str) -> Optional[ET.Element]:
    """Follow first-match direct children: child_path(item, "presentation", "material")."""
    for tag in tags:
        elem = child(elem, tag)
        if elem is None:
            return None
    return elem


def get_text(elem: Optional[ET.Element], default: str = "") -> str:
    """Safely get an element's leading text."""
    if elem is not None and elem.text:
        return elem.text.strip()
    return default


def get_all_text(elem: Optional[ET.Element], default: str = "") -> str:
    """Text of an element including text nested in child markup."""
    if elem is None:
        return default
    text = "".join(elem.itertext()).strip()
    return text or default
