import json
import logging
from typing import Any, List, Optional

import httpx

from object_gateway.common.exceptions import DirectoryUnavailableError
from object_gateway.common.interfaces import IWorkerInventory
from object_gateway.models.schemas import WorkerSummary

logger = logging.getLogger(__name__)


class DockerInventory(IWorkerInventory):
    """Worker inventory backed by the Docker Engine HTTP API"""

    def __init__(
        self,
        docker_host: str = "unix:///var/run/docker.sock",
        api_version: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport
        self.uds = None

        if docker_host.startswith("unix://"):
            self.uds = docker_host[len("unix://") :]
            self.base_url = "http://docker"
        elif docker_host.startswith("tcp://"):
            self.base_url = "http://" + docker_host[len("tcp://") :]
        else:
            self.base_url = docker_host.rstrip("/")

        if api_version:
            self.base_url = f"{self.base_url}/v{api_version.lstrip('v')}"

    def _client(self) -> httpx.AsyncClient:
        transport = self.transport
        if transport is None and self.uds is not None:
            transport = httpx.AsyncHTTPTransport(uds=self.uds)
        return httpx.AsyncClient(
            base_url=self.base_url, transport=transport, timeout=self.timeout
        )

    async def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        try:
            async with self._client() as client:
                response = await client.get(path, params=params)
                logger.debug(
                    f'HTTP Request: GET {path} "{response.status_code} {response.reason_phrase}"'
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise DirectoryUnavailableError(
                f"docker API returned {e.response.status_code} for {path}"
            ) from e
        except httpx.HTTPError as e:
            raise DirectoryUnavailableError(
                f"cannot reach docker API at {self.base_url}: {str(e)}"
            ) from e
        except ValueError as e:
            raise DirectoryUnavailableError(
                f"invalid docker API response for {path}: {str(e)}"
            ) from e

    async def list_running(self) -> List[WorkerSummary]:
        containers = await self._get_json(
            "/containers/json", params={"filters": json.dumps({"status": ["running"]})}
        )
        if not isinstance(containers, list):
            raise DirectoryUnavailableError("cannot list containers: unexpected payload")

        workers = []
        try:
            for container in containers:
                network_settings = container.get("NetworkSettings")
                networks = None
                if network_settings:
                    networks = {
                        name: (settings or {}).get("IPAddress") or ""
                        for name, settings in (
                            network_settings.get("Networks") or {}
                        ).items()
                    }
                workers.append(
                    WorkerSummary(
                        id=container["Id"],
                        names=container.get("Names") or [],
                        networks=networks,
                    )
                )
        except (KeyError, AttributeError, ValueError) as e:
            raise DirectoryUnavailableError(
                f"cannot list containers: malformed entry: {str(e)}"
            ) from e
        return workers

    async def inspect(self, worker_id: str) -> List[str]:
        data = await self._get_json(f"/containers/{worker_id}/json")
        try:
            return (data.get("Config") or {}).get("Env") or []
        except AttributeError as e:
            raise DirectoryUnavailableError(
                f"cannot inspect container {worker_id}: unexpected payload"
            ) from e
