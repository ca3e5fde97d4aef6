"""Tests for the sync coordinator."""

import pytest

from apim_sync.client.exceptions import NetworkError
from apim_sync.config import ApiHubConfig, AzureConfig, SyncConfig
from apim_sync.migration.coordinator import SyncCoordinator


@pytest.fixture
def coordinator(sync_config, stager, source_client, destination_client) -> SyncCoordinator:
    def client_factory(platform, token):
        return source_client if platform.tag == "azure" else destination_client

    return SyncCoordinator(sync_config, stager=stager, client_factory=client_factory)


class StaticTokenProvider:
    def __init__(self, token: str):
        self.token = token

    async def resolve(self, config) -> str:
        return self.token


class TestSync:
    @pytest.mark.asyncio
    async def test_full_sync(self, coordinator, destination_client, stager):
        result = await coordinator.sync("azure", "apihub")

        assert result.result is True
        assert result.message == "Sync from azure to apihub successful!"
        assert sorted(destination_client.apis) == ["billing-v1-azure", "orders-v2-azure"]
        assert stager.service_path("azure", "contoso").is_file()

    @pytest.mark.asyncio
    async def test_offramp_only(self, coordinator, destination_client, stager):
        result = await coordinator.sync(offramp="azure")

        assert result.result is True
        assert result.message == "Sync from azure to none successful!"
        assert stager.list_canonical_groups() == ["billing", "orders"]
        assert destination_client.apis == {}

    @pytest.mark.asyncio
    async def test_failed_offramp_does_not_stop_onramp(
        self, coordinator, source_client, destination_client, stager
    ):
        await coordinator.offramp("azure")
        source_client.fail_listing = NetworkError("Network error: connection refused")

        result = await coordinator.sync("azure", "apihub")

        assert result.result is False
        assert "connection refused" in result.message
        assert sorted(destination_client.apis) == ["billing-v1-azure", "orders-v2-azure"]

    @pytest.mark.asyncio
    async def test_per_api_failures_reported(self, coordinator, stager):
        stager.platform_dir("azure").mkdir(parents=True)
        (stager.platform_dir("azure") / "billing").write_text("")

        result = await coordinator.sync("azure", "apihub")

        assert result.result is False
        assert [failure.api_name for failure in result.failures] == ["billing-v1"]


class TestConfigurationChecks:
    @pytest.mark.asyncio
    async def test_missing_azure_config_is_a_no_op(self, stager, destination_client):
        config = SyncConfig(azure=AzureConfig(resource_group="rg", service_name="svc"))
        coordinator = SyncCoordinator(config, stager=stager)

        result = await coordinator.offramp("azure")

        assert result.success is False
        assert result.message == (
            "No subscription given, cannot export APIs from Azure API Management."
        )
        assert not stager.export_dir.exists()

    @pytest.mark.asyncio
    async def test_missing_credentials_named(self, sync_config, stager):
        sync_config.azure.token = ""
        coordinator = SyncCoordinator(sync_config, stager=stager)

        result = await coordinator.offramp("azure")

        assert result.success is False
        assert result.message == (
            "No client id, secret or tenant id given, cannot export APIs from Azure API Management."
        )

    @pytest.mark.asyncio
    async def test_token_failure_is_a_no_op(self, sync_config, stager):
        sync_config.azure.token = ""
        sync_config.azure.client_id = "c"
        sync_config.azure.client_secret = "s"
        sync_config.azure.tenant_id = "t"
        coordinator = SyncCoordinator(
            sync_config,
            stager=stager,
            token_providers={"azure": StaticTokenProvider(""), "apihub": StaticTokenProvider("")},
        )

        result = await coordinator.offramp("azure")

        assert result.success is False
        assert result.message == (
            "Could not get a valid token, cannot export APIs from Azure API Management."
        )
        assert not stager.export_dir.exists()

    @pytest.mark.asyncio
    async def test_missing_apihub_token_named(self, sync_config, stager):
        sync_config.apihub.token = ""
        result = await SyncCoordinator(sync_config, stager=stager).onramp("apihub")

        assert result.message == "No token given, cannot import APIs into Apigee API hub."
        assert not stager.platform_dir("apihub").exists()

    @pytest.mark.asyncio
    async def test_onramp_resolves_token_once(self, sync_config, stager, destination_client):
        class CountingTokenProvider(StaticTokenProvider):
            calls = 0

            async def resolve(self, config) -> str:
                self.calls += 1
                return self.token

        provider = CountingTokenProvider("gcp-token")
        coordinator = SyncCoordinator(
            sync_config,
            stager=stager,
            token_providers={"azure": StaticTokenProvider("t"), "apihub": provider},
            client_factory=lambda platform, token: destination_client,
        )

        await coordinator.onramp("apihub")

        assert provider.calls == 1

    @pytest.mark.asyncio
    async def test_missing_apihub_config_stages_nothing(self, stager):
        config = SyncConfig(apihub=ApiHubConfig(project="my-project"))
        coordinator = SyncCoordinator(config, stager=stager)

        result = await coordinator.onramp("apihub")

        assert result.success is False
        assert result.message == "No region given, cannot import APIs into Apigee API hub."
        assert not stager.platform_dir("apihub").exists()

    @pytest.mark.asyncio
    async def test_config_defaults_for_filter_and_only_new(
        self, sync_config, stager, source_client, destination_client
    ):
        sync_config.api_name = "billing"
        coordinator = SyncCoordinator(
            sync_config,
            stager=stager,
            client_factory=lambda platform, token: source_client,
        )

        result = await coordinator.export("azure")

        assert result.exported == ["billing-v1"]


class TestStages:
    @pytest.mark.asyncio
    async def test_stages_run_separately(self, coordinator, destination_client):
        export_result = await coordinator.export("azure")
        canonical = coordinator.canonicalize("azure")
        staged = coordinator.stage_onramp("apihub")
        imported = await coordinator.import_staged("apihub", only_new=True)

        assert sorted(export_result.exported) == ["billing-v1", "orders-v2"]
        assert sorted(canonical.written) == ["billing-v1-azure", "orders-v2-azure"]
        assert sorted(staged.written) == ["billing-v1-azure", "orders-v2-azure"]
        assert sorted(imported.imported) == ["billing-v1-azure", "orders-v2-azure"]

    @pytest.mark.asyncio
    async def test_api_filter_limits_every_stage(self, coordinator, destination_client):
        result = await coordinator.offramp("azure", api_filter="orders-v2")
        assert result.names == ["orders-v2-azure"]

        result = await coordinator.onramp("apihub", api_filter="orders-v2")
        assert result.names == ["orders-v2-azure"]
        assert list(destination_client.apis) == ["orders-v2-azure"]

    @pytest.mark.asyncio
    async def test_unwritable_service_metadata_does_not_stop_offramp(self, coordinator, stager):
        stager.service_path("azure", "contoso").mkdir(parents=True)

        result = await coordinator.offramp("azure")

        assert result.success is True
        assert sorted(result.names) == ["billing-v1-azure", "orders-v2-azure"]
        canonical = stager.read_json(stager.canonical_path("orders", "orders-v2-azure"))
        assert canonical["ownerEmail"] == ""

    @pytest.mark.asyncio
    async def test_export_service(self, coordinator, stager):
        result = await coordinator.export_service("azure")

        assert result.success is True
        assert result.names == ["contoso"]
        assert stager.service_path("azure", "contoso").is_file()

    def test_clean(self, coordinator, stager):
        stager.write_platform_api("azure", "orders", "orders-v2", {})

        assert coordinator.clean("azure") is True
        assert coordinator.clean("azure") is False


class TestStatus:
    @pytest.mark.asyncio
    async def test_connected_platforms(self, coordinator):
        statuses = await coordinator.status()

        assert statuses["azure"].connected is True
        assert statuses["azure"].message == (
            "Connected to Azure API Management, 3 APIs found in service contoso."
        )
        assert statuses["apihub"].connected is True
        assert statuses["apihub"].message == "Connected to Apigee API hub, 0 APIs found."

    @pytest.mark.asyncio
    async def test_unconfigured_platforms(self, stager):
        statuses = await SyncCoordinator(SyncConfig(), stager=stager).status()

        assert statuses["azure"].connected is False
        assert statuses["azure"].message == (
            "No subscription given, cannot connect to Azure API Management."
        )
        assert statuses["apihub"].message == "No project given, cannot connect to Apigee API hub."

    @pytest.mark.asyncio
    async def test_connection_failure(self, sync_config, stager, source_client, destination_client):
        source_client.fail_listing = NetworkError("Network error: connection refused")
        coordinator = SyncCoordinator(
            sync_config,
            stager=stager,
            token_providers={
                "azure": StaticTokenProvider("t"),
                "apihub": StaticTokenProvider(""),
            },
            client_factory=lambda platform, token: source_client,
        )

        statuses = await coordinator.status()

        assert statuses["azure"].connected is False
        assert "connection refused" in statuses["azure"].message
        assert statuses["apihub"].message == (
            "Could not get a valid token, cannot connect to Apigee API hub."
        )
