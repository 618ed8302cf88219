import logging
from typing import Callable, Dict, List, Tuple

from object_gateway.common.exceptions import (
    BlobNotFoundError,
    GatewayError,
    NodeUnreachableError,
    ObjectNotFoundError,
    UpstreamOperationError,
)
from object_gateway.common.interfaces import IStorage
from object_gateway.models.schemas import NodeDescriptor, NodeStatus
from object_gateway.storage_node.minio_storage import connect

from .hash_ring import DEFAULT_LOAD, DEFAULT_REPLICATION_FACTOR, HashRing
from .node_directory import NodeDirectory

logger = logging.getLogger(__name__)

StorageFactory = Callable[[NodeDescriptor, str], IStorage]


class BalancedStorage(IStorage):
    """Routes every object to one storage node chosen by consistent hashing.

    Membership is rediscovered and the ring rebuilt on every call, so there
    is no routing state shared between requests. There is no retry and no
    fallback: a key whose owner is down fails until the owner rejoins.
    """

    def __init__(
        self,
        directory: NodeDirectory,
        bucket_name: str,
        storage_factory: StorageFactory = connect,
        replication_factor: int = DEFAULT_REPLICATION_FACTOR,
        load: float = DEFAULT_LOAD,
    ):
        self.directory = directory
        self.bucket_name = bucket_name
        self.storage_factory = storage_factory
        self.replication_factor = replication_factor
        self.load = load

    def build_ring(self, nodes: Dict[str, NodeDescriptor]) -> HashRing:
        return HashRing(
            nodes.keys(), replication_factor=self.replication_factor, load=self.load
        )

    async def locate(self, object_id: str) -> NodeDescriptor:
        """Resolve the node owning ``object_id`` against a fresh snapshot"""
        if not object_id:
            raise ValueError("object id must not be empty")
        try:
            nodes = await self.directory.discover_nodes()
            ring = self.build_ring(nodes)
        except GatewayError as e:
            if e.object_id is None:
                e.object_id = object_id
            raise
        return nodes[ring.locate(object_id)]

    async def _provision(self, node: NodeDescriptor, object_id: str = None) -> IStorage:
        try:
            storage = self.storage_factory(node, self.bucket_name)
            await storage.setup()
        except GatewayError as e:
            raise NodeUnreachableError(
                f"cannot setup storage: {e.message}",
                node_id=node.key,
                object_id=object_id,
            ) from e
        return storage

    async def _get_storage_worker(self, object_id: str) -> Tuple[IStorage, str]:
        node = await self.locate(object_id)
        storage = await self._provision(node, object_id)
        logger.info(f"using storage worker '{node.key}' for object '{object_id}'")
        return storage, node.key

    async def setup(self) -> None:
        """Provision every discovered node, stopping at the first failure"""
        nodes = await self.directory.discover_nodes()
        if not nodes:
            logger.warning("No storage nodes to set up")
            return

        for node_key in sorted(nodes):
            await self._provision(nodes[node_key])
            logger.info(f"Storage worker '{node_key}' is set up")

    async def put(self, object_id: str, content_type: str, body: bytes) -> None:
        storage, storage_id = await self._get_storage_worker(object_id)
        try:
            await storage.put(object_id, content_type, body)
        except GatewayError as e:
            raise UpstreamOperationError(
                f"cannot put using worker: {e.message}",
                node_id=storage_id,
                object_id=object_id,
            ) from e

    async def get(self, object_id: str) -> Tuple[bytes, str]:
        storage, storage_id = await self._get_storage_worker(object_id)
        try:
            return await storage.get(object_id)
        except BlobNotFoundError as e:
            raise ObjectNotFoundError(
                f"object not found on worker: {e.message}",
                node_id=storage_id,
                object_id=object_id,
            ) from e
        except GatewayError as e:
            raise UpstreamOperationError(
                f"cannot get using worker: {e.message}",
                node_id=storage_id,
                object_id=object_id,
            ) from e

    async def describe_nodes(self) -> List[NodeStatus]:
        """Current snapshot with the partition count owned by each node"""
        nodes = await self.directory.discover_nodes()
        if not nodes:
            return []
        loads = self.build_ring(nodes).load_distribution()
        return [
            NodeStatus(
                key=key,
                name=node.name,
                endpoint=node.endpoint,
                partitions=loads.get(key, 0),
                credentials_complete=node.credentials.complete,
            )
            for key, node in sorted(nodes.items())
        ]
