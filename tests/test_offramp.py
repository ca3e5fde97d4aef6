"""Tests for canonicalizing staged APIs."""

import json

import pytest

from apim_sync.config import AzureConfig
from apim_sync.migration.exporter import ApiExporter
from apim_sync.migration.offramp import OfframpTransformer, canonical_name
from apim_sync.platforms import AzurePlatform

from .conftest import FakeSourceClient, azure_api, azure_schema


@pytest.fixture
def transformer(azure_platform, stager) -> OfframpTransformer:
    return OfframpTransformer(azure_platform, stager)


async def _export(client, platform, stager):
    exporter = ApiExporter(client, platform, stager)
    await exporter.export_service()
    return await exporter.export()


def test_canonical_name():
    assert canonical_name("orders-v2", "azure") == "orders-v2-azure"


class TestOfframp:
    @pytest.mark.asyncio
    async def test_canonical_records_written(self, source_client, azure_platform, stager, transformer):
        await _export(source_client, azure_platform, stager)

        result = transformer.offramp()

        assert sorted(result.written) == ["billing-v1-azure", "orders-v2-azure"]
        assert result.failures == []

        record = json.loads(stager.canonical_path("orders", "orders-v2-azure").read_text())
        assert record["name"] == "orders-v2-azure"
        assert record["displayName"] == "Orders v2"
        assert record["basePath"] == "orders"
        assert record["gatewayUrl"] == "https://contoso.azure-api.net/orders"
        assert record["platformId"] == "azure-api-management"

    @pytest.mark.asyncio
    async def test_name_uses_profile_tag(self, stager):
        class ProtoPlatform(AzurePlatform):
            tag = "proto"

        platform = ProtoPlatform(
            AzureConfig(subscription="s", resource_group="r", service_name="contoso")
        )
        client = FakeSourceClient(platform, [azure_api("orders-v2", version="v2", path="/orders")])
        await _export(client, platform, stager)

        result = OfframpTransformer(platform, stager).offramp()

        assert result.written == ["orders-v2-proto"]
        record = stager.read_json(stager.canonical_path("orders", "orders-v2-proto"))
        assert record["gatewayUrl"] == "https://contoso.azure-api.net/orders"
        assert record["basePath"] == "/orders"

    @pytest.mark.asyncio
    async def test_schema_body_copied(self, source_client, azure_platform, stager, transformer):
        await _export(source_client, azure_platform, stager)

        transformer.offramp()

        staged = stager.find_schema_body("azure", "orders", "orders-v2").read_bytes()
        assert stager.canonical_schema_path("orders", "orders-v2-azure").read_bytes() == staged
        assert stager.find_canonical_schema("billing", "billing-v1-azure") is None

    @pytest.mark.asyncio
    async def test_non_json_schema_not_copied(self, azure_platform, stager, transformer):
        schema = azure_schema("billing")
        schema["properties"]["schemaType"] = "yaml"
        schema["properties"]["document"] = {"value": "openapi: 3.0.1"}
        client = FakeSourceClient(
            azure_platform, [azure_api("billing", version="v1")], schemas={"billing": schema}
        )
        await _export(client, azure_platform, stager)

        transformer.offramp()

        assert stager.schema_body_path("azure", "billing", "billing-v1", "yaml").is_file()
        assert stager.find_canonical_schema("billing", "billing-v1-azure") is None

    @pytest.mark.asyncio
    async def test_xsd_schema_not_taken_for_openapi(self, azure_platform, stager, transformer):
        schema = azure_schema("billing")
        schema["properties"]["contentType"] = "application/vnd.ms-azure-apim.xsd+xml"
        schema["properties"]["document"] = {"value": "<xs:schema/>"}
        client = FakeSourceClient(
            azure_platform, [azure_api("billing", version="v1")], schemas={"billing": schema}
        )
        await _export(client, azure_platform, stager)

        transformer.offramp()

        assert stager.schema_body_path("azure", "billing", "billing-v1", "xml").read_bytes() == (
            b"<xs:schema/>"
        )
        assert stager.find_schema_body("azure", "billing", "billing-v1") is None
        assert stager.find_canonical_schema("billing", "billing-v1-azure") is None

    @pytest.mark.asyncio
    async def test_missing_service_metadata_leaves_urls_empty(
        self, source_client, azure_platform, stager, transformer
    ):
        await ApiExporter(source_client, azure_platform, stager).export()

        transformer.offramp()

        record = stager.read_json(stager.canonical_path("billing", "billing-v1-azure"))
        assert record["gatewayUrl"] == ""
        assert record["documentationUrl"] == ""
        assert record["basePath"] == "billing"

    @pytest.mark.asyncio
    async def test_unreadable_file_recorded_and_run_continues(
        self, source_client, azure_platform, stager, transformer
    ):
        await _export(source_client, azure_platform, stager)
        stager.api_path("azure", "billing", "billing-v1").write_text("{broken")

        result = transformer.offramp()

        assert result.written == ["orders-v2-azure"]
        assert [failure.api_name for failure in result.failures] == ["billing-v1"]
        assert result.failures[0].stage == "offramp"

    @pytest.mark.asyncio
    async def test_group_filter(self, source_client, azure_platform, stager, transformer):
        await _export(source_client, azure_platform, stager)

        result = transformer.offramp(group_filter="billing")

        assert result.written == ["billing-v1-azure"]

    def test_nothing_staged(self, transformer):
        result = transformer.offramp()
        assert result.written == []
        assert result.failures == []
