"""
HTTP client for the Task API.

Every call asks the identity client for an ID token and sends it as a
bearer credential. Tokens are never cached here; freshness is left to the
identity client, which refreshes them near expiry.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from .identity import IdentityClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskItem:
    id: str
    title: str
    completed: bool

    @classmethod
    def from_json(cls, data: dict) -> 'TaskItem':
        return cls(
            id=str(data['id']),
            title=data.get('title') or '',
            completed=bool(data.get('completed', False)),
        )


class TaskApiClient:
    """Client for /api/tasks."""

    def __init__(
        self,
        base_url: str,
        identity: IdentityClient,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self._identity = identity
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def _auth_headers(self) -> dict:
        token = self._identity.get_id_token()
        return {'Authorization': f'Bearer {token}'}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self._http.request(method, path, headers=self._auth_headers(), **kwargs)
        response.raise_for_status()
        return response

    def list_tasks(self) -> List[TaskItem]:
        response = self._request('GET', '/tasks')
        return [TaskItem.from_json(item) for item in response.json()]

    def create_task(self, title: str, completed: bool = False) -> TaskItem:
        response = self._request('POST', '/tasks', json={'title': title, 'completed': completed})
        return TaskItem.from_json(response.json())

    def update_task(self, task_id: str, **fields) -> Optional[TaskItem]:
        """Returns None if the task no longer exists."""
        response = self._request('PUT', f'/tasks/{task_id}', json=fields)
        data = response.json()
        return TaskItem.from_json(data) if data is not None else None

    def delete_task(self, task_id: str) -> None:
        self._request('DELETE', f'/tasks/{task_id}')
