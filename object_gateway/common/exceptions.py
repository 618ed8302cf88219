# object_gateway/common/exceptions.py
from typing import Optional


class GatewayError(Exception):
    """Base exception for the object storage gateway"""

    def __init__(
        self,
        message: str,
        node_id: Optional[str] = None,
        object_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.node_id = node_id
        self.object_id = object_id

    def __str__(self) -> str:
        context = []
        if self.node_id is not None:
            context.append(f"node={self.node_id}")
        if self.object_id is not None:
            context.append(f"object={self.object_id}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class DirectoryUnavailableError(GatewayError):
    """Raised when the worker inventory cannot be listed or inspected"""

    pass


class NoAvailableNodesError(GatewayError):
    """Raised when the directory resolved but holds no storage nodes"""

    pass


class NodeUnreachableError(GatewayError):
    """Raised when the selected node cannot be connected to or provisioned"""

    pass


class UpstreamOperationError(GatewayError):
    """Raised when put/get fails on a reachable, provisioned node"""

    pass


class ObjectNotFoundError(UpstreamOperationError):
    """Raised when the owning node has no object under the requested id"""

    pass


class StorageBackendError(GatewayError):
    """Raised by a single-node storage client"""

    pass


class BlobNotFoundError(StorageBackendError):
    """Raised when blob is not found"""

    pass


class MissingCredentialsError(StorageBackendError):
    """Raised when a node descriptor lacks access or secret key"""

    pass
