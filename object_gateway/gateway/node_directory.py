import logging
from typing import Dict, Optional

from object_gateway.common.interfaces import IWorkerInventory
from object_gateway.common.utils import parse_env
from object_gateway.models.schemas import NodeCredentials, NodeDescriptor, WorkerSummary

logger = logging.getLogger(__name__)


class NodeDirectory:
    """Live snapshot of the running, tagged storage workers.

    Every call to ``discover_nodes`` queries the inventory again; nothing is
    cached between calls. Inventory failures propagate as
    ``DirectoryUnavailableError`` and abort the whole discovery.
    """

    def __init__(
        self,
        inventory: IWorkerInventory,
        worker_name_pattern: str,
        network: str,
        worker_port: int = 9000,
        access_key_env: str = "MINIO_ACCESS_KEY",
        secret_key_env: str = "MINIO_SECRET_KEY",
    ):
        self.inventory = inventory
        self.worker_name_pattern = worker_name_pattern
        self.network = network
        self.worker_port = worker_port
        self.access_key_env = access_key_env
        self.secret_key_env = secret_key_env

    def is_member(self, worker: WorkerSummary) -> bool:
        """Tag-based membership: the first declared name carries the pattern"""
        if not worker.names:
            return False
        return self.worker_name_pattern in worker.names[0]

    def _endpoint(self, worker: WorkerSummary) -> Optional[str]:
        if worker.networks is None:
            logger.info(f"Skipping worker {worker.id}: no network settings")
            return None

        ip_address = worker.networks.get(self.network)
        if not ip_address:
            logger.warning(
                f"Skipping worker {worker.id}: no address on network {self.network} "
                f"(attached: {sorted(worker.networks)})"
            )
            return None
        return f"{ip_address}:{self.worker_port}"

    async def discover_nodes(self) -> Dict[str, NodeDescriptor]:
        """Return the current directory keyed by node key (``<id>.<name>``)"""
        workers = await self.inventory.list_running()

        nodes: Dict[str, NodeDescriptor] = {}
        for worker in workers:
            if not self.is_member(worker):
                continue

            endpoint = self._endpoint(worker)
            if endpoint is None:
                continue

            env = parse_env(await self.inventory.inspect(worker.id))
            credentials = NodeCredentials.from_env(
                env, self.access_key_env, self.secret_key_env
            )
            if not credentials.complete:
                logger.warning(
                    f"Worker {worker.id} is missing credential variables {credentials.missing}"
                )

            node = NodeDescriptor(
                id=worker.id,
                name=worker.names[0],
                endpoint=endpoint,
                credentials=credentials,
            )
            nodes[node.key] = node

        if not nodes:
            logger.warning("No storage nodes found")
        else:
            logger.debug(f"Storage nodes: {sorted(nodes)}")
        return nodes
