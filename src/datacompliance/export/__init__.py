"""Export of all personal data held about a user."""

from datacompliance.export.orchestrator import ExportOrchestrator
from datacompliance.export.renderers import render_json, render_xml, tree_to_dict

__all__ = [
    "ExportOrchestrator",
    "render_json",
    "render_xml",
    "tree_to_dict",
]
