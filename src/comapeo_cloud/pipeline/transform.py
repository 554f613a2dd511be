"""
Transformer - Observation to GeoJSON

Converts observation snapshots into GeoJSON Features and wraps them in a
FeatureCollection. Output is deterministic for a given input so repeated
exports of an unchanged project produce identical GeoJSON.
"""

import json
from typing import Any, Optional

from ..domain.models import Observation

VERSION_SUFFIX = "@1"


class Transformer:
    """Builds GeoJSON documents from observations."""

    def to_feature(self, observation: Observation, photos: list[str]) -> dict[str, Any]:
        """
        Build the Feature for one observation.

        Args:
            observation: Observation snapshot
            photos: Filenames of the observation's successfully downloaded
                attachments, in attachment order

        Returns:
            GeoJSON Feature dictionary
        """
        properties = dict(observation.tags)
        properties.update({
            "$created": observation.created_at,
            "$modified": observation.updated_at,
            "$version": f"{observation.doc_id}{VERSION_SUFFIX}",
            "$photos": list(photos),
        })

        return {
            "type": "Feature",
            "geometry": self._geometry(observation),
            "id": observation.doc_id,
            "properties": properties,
        }

    @staticmethod
    def _geometry(observation: Observation) -> Optional[dict[str, Any]]:
        # GeoJSON allows a null geometry for unlocated features
        if not observation.has_position:
            return None
        return {
            "type": "Point",
            "coordinates": [observation.lon, observation.lat],
        }

    @staticmethod
    def to_feature_collection(features: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": features,
        }

    @staticmethod
    def dumps(collection: dict[str, Any]) -> str:
        """Serialize a FeatureCollection as indented UTF-8 JSON text."""
        return json.dumps(collection, indent=2, ensure_ascii=False)
