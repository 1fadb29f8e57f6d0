"""
WebDAV multistatus handling.

PROPFIND responses are parsed by local element name so that both the
usual `DAV:` default namespace and prefixed (`D:`) documents work.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass

from pcui.core.exceptions import MalformedResponseError
from pcui.core.utils import http_date_to_local

ALLPROP_BODY = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<D:propfind xmlns:D="DAV:"><D:allprop/></D:propfind>'
)


@dataclass(frozen=True)
class DavEntry:
    """One `response` element of a multistatus document."""

    href: str
    is_collection: bool
    last_modified: str


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _find(element: ET.Element, *path: str) -> ET.Element | None:
    """Depth-first lookup of the first element matching the local-name path."""
    if not path:
        return element
    for child in _children(element, path[0]):
        found = _find(child, *path[1:])
        if found is not None:
            return found
    return None


def parse_multistatus(xml_text: str) -> list[DavEntry]:
    """
    Parse a multistatus body into entries, in document order.

    Raises:
        MalformedResponseError: If the XML is invalid or an entry lacks
            its href or getlastmodified
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise MalformedResponseError(f"Invalid WebDAV XML: {e}") from e

    if _local(root.tag) != "multistatus":
        raise MalformedResponseError(f"Unexpected root element: {_local(root.tag)}")

    entries = []
    for response in _children(root, "response"):
        href = _find(response, "href")
        modified = _find(response, "propstat", "prop", "getlastmodified")
        if href is None or not href.text:
            raise MalformedResponseError("WebDAV response without href")
        if modified is None or not modified.text:
            raise MalformedResponseError(f"WebDAV response without getlastmodified: {href.text}")

        collection = _find(response, "propstat", "prop", "resourcetype", "collection")
        entries.append(DavEntry(
            href=href.text.strip(),
            is_collection=collection is not None,
            last_modified=modified.text.strip(),
        ))
    return entries


def format_listing(entries: list[DavEntry]) -> str:
    """
    Render entries as `<marker> <updated> <href>` lines.

    Collections are marked `-` and everything else `c`.
    """
    lines = []
    for entry in entries:
        marker = "-" if entry.is_collection else "c"
        lines.append(f"{marker} {http_date_to_local(entry.last_modified)} {entry.href}\n")
    return "".join(lines)
