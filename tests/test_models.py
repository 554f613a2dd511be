import pytest
from pydantic import ValidationError

from comapeo_cloud.domain.models import Observation, RemoteDetectionAlert
from comapeo_cloud.pipeline.transform import Transformer

from server_responses import attachment_url


def test_observation_from_server_json():
    url = attachment_url("p1", "d1", "photo", "capybara")
    observation = Observation.model_validate({
        "docId": "doc_id_2",
        "createdAt": "2024-10-15T21:19:15.207Z",
        "updatedAt": "2024-10-15T21:19:15.207Z",
        "deleted": False,
        "lat": 48.8566,
        "lon": 2.3522,
        "attachments": [{"url": url, "driveId": "d1", "type": "photo", "name": "capybara"}],
        "tags": {"notes": "Capybara", "animal-type": "capybara"},
        "schemaName": "observation",
    })

    assert observation.doc_id == "doc_id_2"
    assert observation.has_position
    assert observation.attachments[0].url == url
    assert observation.attachments[0].drive_id == "d1"
    assert observation.tags["animal-type"] == "capybara"


def test_observation_without_position_or_attachments():
    observation = Observation.model_validate({"docId": "doc_id_3"})

    assert not observation.has_position
    assert observation.attachments == []
    assert observation.tags == {}


def test_feature_reserved_properties_win_over_tags():
    observation = Observation.model_validate({
        "docId": "doc_1",
        "createdAt": "2024-10-14T20:18:14.206Z",
        "updatedAt": "2024-10-14T20:18:14.206Z",
        "lat": -33.8688,
        "lon": 151.2093,
        "tags": {"$photos": "bogus", "notes": "Rapid"},
    })

    feature = Transformer().to_feature(observation, ["a.jpg"])

    assert feature["properties"]["$photos"] == ["a.jpg"]
    assert feature["properties"]["$version"] == "doc_1@1"
    assert feature["geometry"]["coordinates"] == [151.2093, -33.8688]


def test_remote_detection_alert_payload():
    alert = RemoteDetectionAlert.from_point(
        "2024-11-01T00:00:00Z", "2024-11-02T00:00:00Z", "source-1", "fire", -63.5, -10.25
    )

    assert alert.to_payload() == {
        "detectionDateStart": "2024-11-01T00:00:00Z",
        "detectionDateEnd": "2024-11-02T00:00:00Z",
        "sourceId": "source-1",
        "metadata": {"alert_type": "fire"},
        "geometry": {"type": "Point", "coordinates": [-63.5, -10.25]},
    }


def test_observation_is_frozen_and_accepts_field_names():
    observation = Observation(doc_id="doc_1", lat=1.0, lon=2.0)

    assert observation.doc_id == "doc_1"
    with pytest.raises(ValidationError):
        observation.lat = 3.0
