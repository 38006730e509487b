"""
HTTP Client for GCS Live Map CLI

Communicates with gcs-map-server via REST API.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import quote

import requests


class ServerError(Exception):
    """Error from server response"""

    def __init__(self, message: str, response: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.response = response or {}


class ServerConnectionError(Exception):
    """Server connection error"""
    pass


def read_journal(filepath: str) -> Iterator[Tuple[int, Dict[str, Any]]]:
    """
    Iterate over events in a JSON-lines journal

    Blank lines and lines starting with '#' are skipped.

    Yields:
        (line number, event dict)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: On a line that isn't a JSON object
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(path) as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{filepath}:{lineno}: invalid JSON ({e.msg})") from e
            if not isinstance(event, dict):
                raise ValueError(f"{filepath}:{lineno}: expected an object")
            yield lineno, event


class MapClient:
    """HTTP client for gcs-map-server"""

    def __init__(self, base_url: str = "http://localhost:8080"):
        self.base_url = base_url.rstrip('/')
        self.timeout = 10.0

    def is_server_running(self) -> bool:
        """Check if server is accessible"""
        try:
            r = requests.get(f"{self.base_url}/api/health", timeout=2)
            return r.status_code == 200
        except requests.exceptions.RequestException:
            return False

    def _get(self, endpoint: str) -> Dict[str, Any]:
        """Make GET request"""
        try:
            r = requests.get(f"{self.base_url}{endpoint}", timeout=self.timeout)
        except requests.exceptions.ConnectionError:
            raise ServerConnectionError("Cannot connect to server")
        except requests.exceptions.Timeout:
            raise ServerConnectionError("Request timeout")
        return self._decode(r)

    def _post(self, endpoint: str, json_data: Dict = None) -> Dict[str, Any]:
        """Make POST request"""
        try:
            r = requests.post(
                f"{self.base_url}{endpoint}",
                json=json_data,
                timeout=self.timeout
            )
        except requests.exceptions.ConnectionError:
            raise ServerConnectionError("Cannot connect to server")
        except requests.exceptions.Timeout:
            raise ServerConnectionError("Request timeout")
        return self._decode(r)

    @staticmethod
    def _decode(r) -> Dict[str, Any]:
        try:
            data = r.json()
        except ValueError:
            raise ServerError(f"HTTP {r.status_code}: non-JSON response")
        if r.status_code >= 400:
            raise ServerError(data.get('error', f'HTTP {r.status_code}'), data)
        return data

    # ==================== Status ====================

    def get_health(self) -> Dict[str, Any]:
        """Get health check"""
        return self._get("/api/health")

    def get_state(self) -> Dict[str, Any]:
        """Get full map state"""
        return self._get("/api/state")

    def get_vehicle(self, name: str) -> Dict[str, Any]:
        """Get telemetry and label for one vehicle"""
        return self._get(f"/api/vehicles/{quote(name, safe='')}")

    def list_events(self) -> Dict[str, List[str]]:
        """Event names and their parameters"""
        return self._get("/api/events").get('events', {})

    # ==================== Events ====================

    def send_event(self, call: str, *args) -> Dict[str, Any]:
        """Apply one event on the server"""
        return self._post("/api/events", json_data={'call': call, 'args': list(args)})

    def send_batch(self, events: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Apply events in order; stops at the first rejected one"""
        return self._post("/api/events/batch", json_data={'events': events})
