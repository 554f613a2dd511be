"""
CoMapeo Export Pipeline Components

Components:
- attachments: URL resolution and single-attachment download
- transform: Transformer for Observation -> GeoJSON Feature conversion
- export: Exporter for the concurrent GeoJSON/ZIP project export
"""

from .attachments import download_attachment, get_output_filename, parse_attachment_url
from .export import Exporter
from .transform import Transformer

__all__ = [
    "Exporter", "Transformer",
    "download_attachment", "get_output_filename", "parse_attachment_url"
]
