"""Declarative extraction of flat rows from XML responses.

A table is a repeated element (``Bucket``, ``Contents``) plus a mapping
of column label to child tag. Each repeated element becomes one row;
a missing child tag yields an empty string, never an error. Tags are
matched by local name so namespaced and plain documents parse alike.

The same lookup backs single-field reads such as the ``UploadId`` of an
Initiate-Multipart-Upload response.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from obscli.models import PartDescriptor


@dataclass(frozen=True)
class XmlTable:
    """Mapping from a repeated XML element to table rows."""

    repeated_tag: str
    columns: tuple[tuple[str, str], ...]


BUCKET_TABLE = XmlTable(
    repeated_tag="Bucket",
    columns=(
        ("Name", "Name"),
        ("Created At", "CreationDate"),
        ("Location", "Location"),
        ("Type", "BucketType"),
    ),
)

OBJECT_TABLE = XmlTable(
    repeated_tag="Contents",
    columns=(
        ("Key (Object Path)", "Key"),
        ("Last Modified", "LastModified"),
        ("ETag", "ETag"),
        ("Size", "Size"),
        ("Storage Class", "StorageClass"),
    ),
)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse(document: Union[str, bytes]) -> Optional[ET.Element]:
    if not document or not document.strip():
        return None
    try:
        return ET.fromstring(document)
    except ET.ParseError:
        return None


def _child_text(element: ET.Element, tag: str) -> str:
    for node in element.iter():
        if node is element:
            continue
        if _local_name(node.tag) == tag:
            return node.text or ""
    return ""


def extract_rows(document: Union[str, bytes], table: XmlTable) -> Optional[list[dict[str, str]]]:
    """Extract one row per repeated element.

    Returns:
        A list of rows keyed by column label, or None when the document
        is empty or not XML.
    """
    root = _parse(document)
    if root is None:
        return None
    return [
        {label: _child_text(node, tag) for label, tag in table.columns}
        for node in root.iter()
        if _local_name(node.tag) == table.repeated_tag
    ]


def find_text(document: Union[str, bytes], tag: str) -> Optional[str]:
    """Return the text of the first element named ``tag``, if any."""
    root = _parse(document)
    if root is None:
        return None
    for node in root.iter():
        if _local_name(node.tag) == tag:
            return node.text or ""
    return None


def _serialize(root: ET.Element) -> str:
    return ET.tostring(root, encoding="unicode")


def create_bucket_configuration(region: str) -> str:
    root = ET.Element("CreateBucketConfiguration")
    ET.SubElement(root, "Location").text = region
    return _serialize(root)


def completion_manifest(parts: Iterable[PartDescriptor]) -> str:
    """Serialize the Complete-Multipart-Upload body.

    Parts are written in ascending part-number order whatever order they
    arrive in.
    """
    root = ET.Element("CompleteMultipartUpload")
    for part in sorted(parts, key=lambda p: p.part_number):
        node = ET.SubElement(root, "Part")
        ET.SubElement(node, "PartNumber").text = str(part.part_number)
        ET.SubElement(node, "ETag").text = part.etag
    return _serialize(root)
