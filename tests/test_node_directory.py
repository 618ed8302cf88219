"""
Tests for node discovery
"""
import pytest

from fakes import ACCESS_KEY_ENV, NETWORK, PATTERN, SECRET_KEY_ENV, FakeInventory, worker

from object_gateway.common.exceptions import DirectoryUnavailableError
from object_gateway.common.utils import parse_env
from object_gateway.gateway.node_directory import NodeDirectory
from object_gateway.models.schemas import WorkerSummary


def make_directory(inventory):
    return NodeDirectory(
        inventory,
        worker_name_pattern=PATTERN,
        network=NETWORK,
        worker_port=9000,
        access_key_env=ACCESS_KEY_ENV,
        secret_key_env=SECRET_KEY_ENV,
    )


class TestParseEnv:
    def test_splits_on_first_equals_only(self):
        env = parse_env(["A=1", "B=x=y==", "C="])
        assert env == {"A": "1", "B": "x=y==", "C": ""}

    def test_ignores_entries_without_equals(self):
        assert parse_env(["PATH", "D=4"]) == {"D": "4"}


class TestDiscoverNodes:
    @pytest.mark.asyncio
    async def test_discovers_tagged_workers(self):
        inventory = FakeInventory(
            [
                worker("aaa", f"{PATTERN}1", ip="10.0.0.2"),
                worker("bbb", f"{PATTERN}2", ip="10.0.0.3"),
            ]
        )
        nodes = await make_directory(inventory).discover_nodes()

        assert sorted(nodes) == [f"aaa./{PATTERN}1", f"bbb./{PATTERN}2"]
        node = nodes[f"aaa./{PATTERN}1"]
        assert node.endpoint == "10.0.0.2:9000"
        assert node.credentials.access_key == "access-aaa"
        assert node.credentials.secret_key == "secret-aaa"
        assert node.credentials.complete

    @pytest.mark.asyncio
    async def test_untagged_workers_are_not_inspected(self):
        inventory = FakeInventory([worker("aaa", f"{PATTERN}1"), worker("db", "postgres")])
        nodes = await make_directory(inventory).discover_nodes()

        assert list(nodes) == [f"aaa./{PATTERN}1"]
        assert inventory.inspected == ["aaa"]

    @pytest.mark.asyncio
    async def test_only_first_name_counts(self):
        summary = WorkerSummary(
            id="ccc", names=["/proxy", f"/{PATTERN}alias"], networks={NETWORK: "10.0.0.9"}
        )
        inventory = FakeInventory([(summary, [])])
        assert await make_directory(inventory).discover_nodes() == {}

    @pytest.mark.asyncio
    async def test_worker_without_network_is_skipped(self):
        inventory = FakeInventory(
            [worker("aaa", f"{PATTERN}1", ip=None), worker("bbb", f"{PATTERN}2")]
        )
        nodes = await make_directory(inventory).discover_nodes()
        assert list(nodes) == [f"bbb./{PATTERN}2"]

    @pytest.mark.asyncio
    async def test_worker_on_other_network_is_skipped(self):
        summary = WorkerSummary(
            id="aaa", names=[f"/{PATTERN}1"], networks={"bridge": "172.17.0.2"}
        )
        inventory = FakeInventory([(summary, [])])
        assert await make_directory(inventory).discover_nodes() == {}

    @pytest.mark.asyncio
    async def test_missing_credentials_are_reported_not_fatal(self):
        inventory = FakeInventory(
            [worker("aaa", f"{PATTERN}1", env=[f"{ACCESS_KEY_ENV}=key", "OTHER=1"])]
        )
        nodes = await make_directory(inventory).discover_nodes()

        credentials = nodes[f"aaa./{PATTERN}1"].credentials
        assert credentials.access_key == "key"
        assert credentials.secret_key == ""
        assert credentials.missing == [SECRET_KEY_ENV]
        assert not credentials.complete

    @pytest.mark.asyncio
    async def test_empty_credential_counts_as_missing(self):
        inventory = FakeInventory(
            [worker("aaa", f"{PATTERN}1", env=[f"{ACCESS_KEY_ENV}=key", f"{SECRET_KEY_ENV}="])]
        )
        nodes = await make_directory(inventory).discover_nodes()

        credentials = nodes[f"aaa./{PATTERN}1"].credentials
        assert credentials.missing == [SECRET_KEY_ENV]
        assert not credentials.complete

    @pytest.mark.asyncio
    async def test_listing_failure_aborts(self):
        inventory = FakeInventory([worker("aaa", f"{PATTERN}1")])
        inventory.fail_listing = True
        with pytest.raises(DirectoryUnavailableError):
            await make_directory(inventory).discover_nodes()

    @pytest.mark.asyncio
    async def test_inspect_failure_aborts_whole_discovery(self):
        inventory = FakeInventory(
            [worker("aaa", f"{PATTERN}1"), worker("bbb", f"{PATTERN}2")]
        )
        inventory.fail_inspect.add("bbb")
        with pytest.raises(DirectoryUnavailableError):
            await make_directory(inventory).discover_nodes()

    @pytest.mark.asyncio
    async def test_each_call_queries_the_inventory(self):
        inventory = FakeInventory([worker("aaa", f"{PATTERN}1")])
        directory = make_directory(inventory)
        assert len(await directory.discover_nodes()) == 1

        inventory.add(*worker("bbb", f"{PATTERN}2"))
        assert len(await directory.discover_nodes()) == 2
