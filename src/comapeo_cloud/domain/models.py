"""
Client Domain Models

Pydantic models for the resources returned by and sent to CoMapeo Cloud.
Field aliases match the server's camelCase JSON keys.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Attachment(BaseModel):
    """Attachment reference embedded in an observation."""
    url: str = Field(..., description="Fully-qualified attachment URL")
    drive_id: Optional[str] = Field(None, alias="driveId", description="Drive discovery ID")
    type: Optional[str] = Field(None, description="Media type (photo, audio)")
    name: Optional[str] = Field(None, description="Attachment name")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Observation(BaseModel):
    """Snapshot of a project observation as served by the API."""
    doc_id: str = Field(..., alias="docId", description="Observation document ID")
    created_at: Optional[str] = Field(None, alias="createdAt", description="Creation timestamp")
    updated_at: Optional[str] = Field(None, alias="updatedAt", description="Last update timestamp")
    deleted: bool = Field(default=False, description="Whether the observation is deleted")
    lat: Optional[float] = Field(None, description="Latitude in degrees")
    lon: Optional[float] = Field(None, description="Longitude in degrees")
    tags: dict[str, Any] = Field(default_factory=dict, description="Arbitrary observation tags")
    attachments: list[Attachment] = Field(default_factory=list, description="Ordered attachment references")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @property
    def has_position(self) -> bool:
        return self.lat is not None and self.lon is not None


class PointGeometry(BaseModel):
    """GeoJSON Point geometry."""
    type: Literal["Point"] = "Point"
    coordinates: tuple[float, float] = Field(..., description="(longitude, latitude)")


class RemoteDetectionAlert(BaseModel):
    """Remote detection alert posted to a project."""
    detection_date_start: str = Field(..., alias="detectionDateStart", description="Detection start (ISO timestamp)")
    detection_date_end: str = Field(..., alias="detectionDateEnd", description="Detection end (ISO timestamp)")
    source_id: str = Field(..., alias="sourceId", description="Alert source identifier")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Free-form alert metadata")
    geometry: PointGeometry

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_point(
        cls,
        start_date: str,
        end_date: str,
        source_id: str,
        alert_type: str,
        lon: float,
        lat: float
    ) -> "RemoteDetectionAlert":
        return cls(
            detection_date_start=start_date,
            detection_date_end=end_date,
            source_id=source_id,
            metadata={"alert_type": alert_type},
            geometry=PointGeometry(coordinates=(lon, lat)),
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body expected by the server."""
        return self.model_dump(by_alias=True, mode="json")
