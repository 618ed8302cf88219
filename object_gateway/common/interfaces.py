from abc import ABC, abstractmethod
from typing import List, Tuple

from object_gateway.models.schemas import WorkerSummary


class IStorage(ABC):
    @abstractmethod
    async def setup(self) -> None:
        """Provision the backing bucket(s); safe to call repeatedly"""
        pass

    @abstractmethod
    async def put(self, object_id: str, content_type: str, body: bytes) -> None:
        """Store an object body together with its content type"""
        pass

    @abstractmethod
    async def get(self, object_id: str) -> Tuple[bytes, str]:
        """Retrieve an object body and its content type"""
        pass


class IWorkerInventory(ABC):
    @abstractmethod
    async def list_running(self) -> List[WorkerSummary]:
        """List currently running workers"""
        pass

    @abstractmethod
    async def inspect(self, worker_id: str) -> List[str]:
        """Return the KEY=VALUE environment entries of a worker"""
        pass
