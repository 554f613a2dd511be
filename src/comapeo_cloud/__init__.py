"""
CoMapeo Cloud command-line client.

Talks to a CoMapeo Cloud server to list projects, observations and remote
detection alerts, download attachments, and export a project as a zip
archive containing GeoJSON plus the attachment binaries.
"""

__version__ = "1.0.3"
