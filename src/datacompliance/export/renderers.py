"""Serializers for export trees.

XML follows the disclosure format ``root > domain[name, description] >
item > column[name]``; JSON mirrors the same structure.
"""

import json
import re
import xml.etree.ElementTree as ET
from typing import Any

from datacompliance.types import ExportTree

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Characters XML 1.0 cannot represent, even escaped
_XML_INVALID = re.compile("[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def _xml_text(value: str) -> str:
    return _XML_INVALID.sub("", value)


def tree_to_dict(tree: ExportTree) -> dict[str, Any]:
    """Plain-data form of an export tree."""
    return {
        "user_id": tree.user_id,
        "generated_at": tree.generated_at.isoformat(),
        "domains": [
            {
                "name": section.name,
                "description": section.description,
                "items": [dict(item.fields) for item in section.items],
                **({"warning": section.warning} if section.warning else {}),
            }
            for section in tree.sections
        ],
        "warnings": list(tree.warnings),
    }


def render_json(tree: ExportTree, indent: int | None = 2) -> str:
    return json.dumps(tree_to_dict(tree), indent=indent)


def render_xml(tree: ExportTree) -> str:
    """Render a tree as an XML document string."""
    root = ET.Element("root")

    for section in tree.sections:
        domain = ET.SubElement(
            root,
            "domain",
            {"name": _xml_text(section.name), "description": _xml_text(section.description)},
        )
        for item in section.items:
            item_el = ET.SubElement(domain, "item")
            for name, value in item.fields.items():
                column = ET.SubElement(item_el, "column", {"name": _xml_text(name)})
                if value is not None:
                    column.text = _xml_text(value)

    if tree.warnings:
        warnings = ET.SubElement(root, "warnings")
        for warning in tree.warnings:
            ET.SubElement(warnings, "warning").text = _xml_text(warning)

    return XML_DECLARATION + ET.tostring(root, encoding="unicode")
