"""Canned CoMapeo Cloud server data used across the test suite."""

SERVER_URL = "http://comapeo.example.org"
ACCESS_TOKEN = "test_token"
PROJECT_ID = "proj_abc123"


def attachment_url(project_id, drive_id, type_, name, server_url=SERVER_URL):
    return f"{server_url}/projects/{project_id}/attachments/{drive_id}/{type_}/{name}"


def make_observation(doc_id, attachments=(), lat=-33.8688, lon=151.2093, tags=None):
    return {
        "docId": doc_id,
        "createdAt": "2024-10-14T20:18:14.206Z",
        "updatedAt": "2024-10-15T08:02:11.001Z",
        "deleted": False,
        "lat": lat,
        "lon": lon,
        "tags": tags if tags is not None else {"notes": f"Observation {doc_id}"},
        "attachments": [{"url": url} for url in attachments],
    }


def observations_response(*observations):
    return {"data": list(observations)}
