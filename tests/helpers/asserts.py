from typing import Any, Dict, Optional
from fastapi.testclient import TestClient


def api_call(client: TestClient, method: str, path: str, headers: Optional[Dict[str, str]] = None,
             json: Optional[Dict[str, Any]] = None, expected_status: Optional[int] = None):
    """Sends a request and fails with the response envelope unless it succeeded."""
    response = client.request(method, path, headers=headers, json=json)
    if expected_status is None:
        succeeded = 200 <= response.status_code < 300
    else:
        succeeded = response.status_code == expected_status
    assert succeeded, f"{method} {path} => {response.status_code}: {response.text}"
    return response
