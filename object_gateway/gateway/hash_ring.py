import bisect
import math
import struct
from typing import Callable, Dict, Iterable, List, Mapping, Union

import xxhash

from object_gateway.common.exceptions import NoAvailableNodesError

DEFAULT_REPLICATION_FACTOR = 20
DEFAULT_LOAD = 1.25


def hash64(data: bytes) -> int:
    """xxHash64 with seed 0, used for ring positions, partitions and keys alike"""
    return xxhash.xxh64_intdigest(data)


class HashRing:
    """Consistent hash ring with bounded-load partition assignment.

    Each member occupies ``replication_factor`` virtual positions on the
    ring. The key space is split into one partition per member; partitions
    are handed to the nearest successor position whose member still has room
    under ``ceil(partitions / members * load)``. Keys map to a partition by
    hash, so ``locate`` is a pure function of the member set and the key.
    """

    def __init__(
        self,
        members: Iterable[str],
        replication_factor: int = DEFAULT_REPLICATION_FACTOR,
        load: float = DEFAULT_LOAD,
        hasher: Callable[[bytes], int] = hash64,
    ):
        if replication_factor < 1:
            raise ValueError("replication_factor must be at least 1")
        if load < 1.0:
            raise ValueError("load must be at least 1.0")

        self.members: List[str] = sorted(set(members))
        if not self.members:
            raise NoAvailableNodesError("cannot build a hash ring without members")

        self.replication_factor = replication_factor
        self.load = load
        self.hasher = hasher
        self.partition_count = len(self.members)

        self.ring: Dict[int, str] = {}  # Position hash -> member
        self.sorted_keys: List[int] = []
        for member in self.members:
            self._add_member(member)

        self.partitions: Dict[int, str] = {}
        self.loads: Dict[str, int] = {member: 0 for member in self.members}
        self._distribute_partitions()

    def _add_member(self, member: str):
        for i in range(self.replication_factor):
            key = self.hasher(f"{member}{i}".encode("utf-8"))
            if key not in self.ring:
                bisect.insort(self.sorted_keys, key)
            self.ring[key] = member

    def average_load(self) -> int:
        return math.ceil((self.partition_count // len(self.members)) * self.load)

    def _distribute_partitions(self):
        for part_id in range(self.partition_count):
            key = self.hasher(struct.pack("<Q", part_id))
            idx = bisect.bisect_left(self.sorted_keys, key)
            if idx >= len(self.sorted_keys):
                idx = 0
            self._distribute_with_load(part_id, idx)

    def _distribute_with_load(self, part_id: int, idx: int):
        avg_load = self.average_load()
        for _ in range(len(self.sorted_keys)):
            member = self.ring[self.sorted_keys[idx]]
            if self.loads[member] + 1 <= avg_load:
                self.partitions[part_id] = member
                self.loads[member] += 1
                return
            idx += 1
            if idx >= len(self.sorted_keys):
                idx = 0
        raise RuntimeError(f"not enough room to distribute partition {part_id}")

    def find_partition_id(self, key: Union[bytes, str]) -> int:
        if isinstance(key, str):
            key = key.encode("utf-8")
        return self.hasher(key) % self.partition_count

    def partition_owner(self, part_id: int) -> str:
        return self.partitions[part_id]

    def locate(self, key: Union[bytes, str]) -> str:
        """Return the member owning ``key``"""
        return self.partitions[self.find_partition_id(key)]

    def load_distribution(self) -> Dict[str, int]:
        return dict(self.loads)


def locate_node(
    nodes: Mapping[str, object],
    key: Union[bytes, str],
    replication_factor: int = DEFAULT_REPLICATION_FACTOR,
    load: float = DEFAULT_LOAD,
) -> str:
    """Pure routing function: (directory, key) -> node key"""
    return HashRing(nodes.keys(), replication_factor=replication_factor, load=load).locate(key)
