# object_gateway/gateway/coordinator.py
import logging
from functools import partial
from time import gmtime

from object_gateway.common.config import Settings
from object_gateway.storage_node.minio_storage import connect

from .balanced_storage import BalancedStorage
from .docker_inventory import DockerInventory
from .node_directory import NodeDirectory

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False):
    # https://stackoverflow.com/a/7517430/49489
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s.%(msecs)03dZ [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    logging.Formatter.converter = gmtime


def build_storage(settings: Settings) -> BalancedStorage:
    """Wire the docker inventory, node directory and router from settings"""
    inventory = DockerInventory(
        docker_host=settings.DOCKER_HOST,
        api_version=settings.DOCKER_API_VERSION,
        timeout=settings.DOCKER_TIMEOUT,
    )
    directory = NodeDirectory(
        inventory,
        worker_name_pattern=settings.WORKER_NAME_PATTERN,
        network=settings.DOCKER_NETWORK,
        worker_port=settings.WORKER_PORT,
        access_key_env=settings.ACCESS_KEY_ENV,
        secret_key_env=settings.SECRET_KEY_ENV,
    )
    logger.info(
        f"Routing objects to workers named '*{settings.WORKER_NAME_PATTERN}*' "
        f"on network {settings.DOCKER_NETWORK} via {settings.DOCKER_HOST}"
    )
    return BalancedStorage(
        directory,
        bucket_name=settings.BUCKET_NAME,
        storage_factory=partial(connect, timeout=settings.STORAGE_TIMEOUT),
        replication_factor=settings.RING_REPLICATION_FACTOR,
        load=settings.RING_LOAD,
    )
