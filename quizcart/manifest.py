"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

manifest.py - Locate imsmanifest.xml and select quiz resources from it.

Manifest lookup searches the whole tree. When several imsmanifest.xml files
exist (nested cartridges, LMS export wrappers), the shallowest one wins and
ties at equal depth are broken by full path in lexicographic order. The
root manifest therefore always beats nested ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
from xml.etree import ElementTree as ET

from quizcart.errors import ManifestNotFound, ManifestParseError
from quizcart.file_tree import FileNode, find_files_named, split_path
from quizcart.models import ManifestResource
from quizcart.xml_utils import XML_ERRORS, get_text, parse_xml, qualified

MANIFEST_FILENAME = "imsmanifest.xml"

# Content packaging namespace
IMSCP_NS = "http://www.imsglobal.org/xsd/imscp_v1p1"

QTI_RESOURCE_TYPES = ("imsqti_xmlv1p2", "imsqti_xmlv2p1")
QUIZ_TYPE_KEYWORDS = ("assessment", "qti", "quiz")


@dataclass
class Manifest:
    path: str
    root: ET.Element


# ============================================================================
# Locate / Parse
# ============================================================================

def locate_manifest(tree: FileNode) -> Optional[str]:
    """Path of the manifest to use, or None if the archive has none."""
    candidates = [path for path, _ in find_files_named(tree, MANIFEST_FILENAME)]
    if not candidates:
        return None
    candidates.sort(key=lambda p: (len(split_path(p)), p))
    return candidates[0]


def parse_manifest(tree: FileNode) -> Manifest:
    """
    Find and parse the manifest.

    Raises:
        ManifestNotFound: no imsmanifest.xml anywhere in the tree
        ManifestParseError: the chosen manifest is not parseable XML
    """
    path = locate_manifest(tree)
    if path is None:
        raise ManifestNotFound("No imsmanifest.xml found in cartridge")

    matches = find_files_named(tree, MANIFEST_FILENAME)
    if len(matches) > 1:
        print(f"[manifest] {len(matches)} manifests found; using {path}")

    node = dict(matches)[path]
    try:
        root = parse_xml(node.data or b"")
    except XML_ERRORS as e:
        raise ManifestParseError(f"Failed to parse manifest {path}: {e}") from e

    return Manifest(path=path, root=root)


# ============================================================================
# Quiz Resource Selection
# ============================================================================

def is_quiz_resource_type(resource_type: str) -> bool:
    """Check if a manifest resource type string denotes a quiz/assessment."""
    if resource_type in QTI_RESOURCE_TYPES:
        return True
    return any(keyword in resource_type for keyword in QUIZ_TYPE_KEYWORDS)


def parse_resource(resource_elem: ET.Element) -> Optional[ManifestResource]:
    """Parse a single resource element; None when it has no identifier."""
    identifier = resource_elem.get("identifier")
    if not identifier:
        return None

    files = []
    for file_elem in resource_elem.findall(qualified("file", IMSCP_NS)):
        file_href = file_elem.get("href")
        if file_href:
            files.append(file_href)

    title_elem = resource_elem.find(qualified("title", IMSCP_NS))

    return ManifestResource(
        identifier=identifier,
        resource_type=resource_elem.get("type", ""),
        href=resource_elem.get("href", ""),
        files=tuple(files),
        title=get_text(title_elem, identifier),
    )


def select_quiz_resources(manifest: Manifest) -> List[ManifestResource]:
    """Quiz-like resources in manifest document order."""
    resources: List[ManifestResource] = []

    resources_elem = manifest.root.find(qualified("resources", IMSCP_NS))
    if resources_elem is None:
        print("[manifest] No resources found in manifest")
        return resources

    for resource_elem in resources_elem.findall(qualified("resource", IMSCP_NS)):
        resource_type = resource_elem.get("type")
        if resource_type is None:
            continue
        if not is_quiz_resource_type(resource_type):
            continue

        resource = parse_resource(resource_elem)
        if resource is None:
            continue

        resources.append(resource)
        print(f"[manifest] Found quiz resource: {resource.title} ({resource.identifier}, {resource_type})")

    print(f"[manifest] Found {len(resources)} quiz resources in manifest")
    return resources
