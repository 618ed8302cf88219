# object_gateway/models/schemas.py
from pydantic import BaseModel
from typing import Dict, List, Optional


class WorkerSummary(BaseModel):
    id: str
    names: List[str] = []
    # network name -> IP address; None when the worker has no network settings
    networks: Optional[Dict[str, str]] = None


class NodeCredentials(BaseModel):
    access_key: str = ""
    secret_key: str = ""
    missing: List[str] = []

    @property
    def complete(self) -> bool:
        return not self.missing

    @classmethod
    def from_env(
        cls, env: Dict[str, str], access_key_env: str, secret_key_env: str
    ) -> "NodeCredentials":
        missing = [name for name in (access_key_env, secret_key_env) if not env.get(name)]
        return cls(
            access_key=env.get(access_key_env, ""),
            secret_key=env.get(secret_key_env, ""),
            missing=missing,
        )


class NodeDescriptor(BaseModel):
    id: str
    name: str
    endpoint: str
    credentials: NodeCredentials

    @property
    def key(self) -> str:
        return f"{self.id}.{self.name}"

    def __str__(self) -> str:
        return self.key


class NodeStatus(BaseModel):
    key: str
    name: str
    endpoint: str
    partitions: int
    credentials_complete: bool


class NodesResponse(BaseModel):
    active_nodes_count: int
    active_nodes: List[NodeStatus]


class MessageResponse(BaseModel):
    message: str
