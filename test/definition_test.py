import warnings

import pytest

from conftest import StaticFileMicrosoftClient
from fix_azure_storage.config import AzureConfig
from fix_azure_storage.definition import (
    DefinitionAlreadySubmittedError,
    StorageAccounts,
    StorageDefinitionError,
    WithActiveDirectory,
    WithCreate,
    WithCreateAndAccessTier,
    WithGroup,
)
from fix_azure_storage.resource.model import (
    AccessTier,
    ActiveDirectory,
    AzureActiveDirectoryDomainServices,
    AzureCustomDomain,
    DefaultAction,
    KeySource,
    Kind,
    NoDirectoryService,
    RoutingChoice,
    SkuName,
    StorageAccountDefinition,
)


def test_region_and_group(storage_accounts: StorageAccounts) -> None:
    group_stage = storage_accounts.define("teststorage").with_region("West Europe")
    assert isinstance(group_stage, WithGroup)
    assert not hasattr(group_stage, "with_sku_name_standard_lrs")
    stage = group_stage.with_new_resource_group()
    assert isinstance(stage, WithCreate)
    definition = stage.definition
    assert definition.region == "westeurope"
    assert definition.resource_group == "rgteststorage"
    assert definition.new_resource_group is True
    definition = group_stage.with_existing_resource_group("existing").definition
    assert definition.resource_group == "existing"
    assert definition.new_resource_group is False


def test_sku_last_write_wins(with_create: WithCreate) -> None:
    stage = with_create.with_sku_name_premium_zrs().with_sku_name_standard_gzrs().with_sku_name_standard_ragrs()
    assert stage.definition.sku == SkuName.standard_ragrs
    assert stage.definition.to_payload()["sku"] == {"name": "Standard_RAGRS"}


def test_all_sku_names(with_create: WithCreate) -> None:
    setters = {
        with_create.with_sku_name_standard_lrs: SkuName.standard_lrs,
        with_create.with_sku_name_standard_grs: SkuName.standard_grs,
        with_create.with_sku_name_standard_ragrs: SkuName.standard_ragrs,
        with_create.with_sku_name_standard_zrs: SkuName.standard_zrs,
        with_create.with_sku_name_standard_gzrs: SkuName.standard_gzrs,
        with_create.with_sku_name_standard_ragzrs: SkuName.standard_ragzrs,
        with_create.with_sku_name_premium_lrs: SkuName.premium_lrs,
        with_create.with_sku_name_premium_zrs: SkuName.premium_zrs,
    }
    for setter, sku in setters.items():
        assert setter().definition.sku == sku


def test_access_tier_only_for_blob_storage(with_create: WithCreate) -> None:
    blob = with_create.with_blob_storage_account_kind()
    assert isinstance(blob, WithCreateAndAccessTier)
    assert hasattr(blob, "with_access_tier")
    # blob storage defaults to the hot tier
    assert blob.definition.access_tier == AccessTier.hot
    assert blob.with_access_tier(AccessTier.cool).definition.access_tier == AccessTier.cool

    for other in [
        with_create.with_general_purpose_account_kind,
        with_create.with_general_purpose_account_kind_v2,
        with_create.with_block_blob_storage_account_kind,
        with_create.with_file_storage_account_kind,
    ]:
        stage = other()
        assert not hasattr(stage, "with_access_tier")
        # the tier of a previous blob storage kind is gone
        assert stage.definition.access_tier is None

    # any other call leaves the access tier stage
    assert not hasattr(with_create.with_blob_storage_account_kind().with_only_https_traffic(), "with_access_tier")


def test_stale_access_tier_view_is_rejected(with_create: WithCreate) -> None:
    blob = with_create.with_blob_storage_account_kind()
    blob.with_general_purpose_account_kind()
    with pytest.raises(StorageDefinitionError):
        blob.with_access_tier(AccessTier.cool)
    assert blob.definition.account_kind == Kind.storage
    assert blob.definition.access_tier is None
    assert "accessTier" not in blob.definition.to_payload()["properties"]


def test_account_kinds(with_create: WithCreate) -> None:
    assert with_create.with_general_purpose_account_kind().definition.account_kind == Kind.storage
    assert with_create.with_general_purpose_account_kind_v2().definition.account_kind == Kind.storage_v2
    assert with_create.with_block_blob_storage_account_kind().definition.account_kind == Kind.block_blob_storage
    assert with_create.with_file_storage_account_kind().definition.account_kind == Kind.file_storage
    assert with_create.with_blob_storage_account_kind().definition.account_kind == Kind.blob_storage


def test_tags_merge(with_create: WithCreate) -> None:
    stage = with_create.with_tags({"a": "1"}).with_tags({"a": "1"})
    assert stage.definition.tags == {"a": "1"}
    stage = stage.with_tags({"a": "2"})
    assert stage.definition.tags == {"a": "2"}
    stage = stage.with_tag("b", "3").with_tags({"c": "4"})
    assert stage.definition.tags == {"a": "2", "b": "3", "c": "4"}


def test_default_action_last_write_wins(with_create: WithCreate) -> None:
    stage = with_create.with_access_from_all_networks().with_access_from_selected_networks()
    assert stage.definition.network_rules is not None
    assert stage.definition.network_rules.default_action == DefaultAction.deny
    stage = stage.with_access_from_all_networks()
    assert stage.definition.to_payload()["properties"]["networkAcls"]["defaultAction"] == "Allow"


def test_network_rules(with_create: WithCreate) -> None:
    subnet = "/subscriptions/test/resourceGroups/rgtest/providers/Microsoft.Network/virtualNetworks/vnet/subnets/default"
    stage = (
        with_create.with_access_from_network_subnet(subnet)
        .with_access_from_network_subnet(subnet.upper())
        .with_access_from_ip_address("23.45.1.0")
        .with_access_from_ip_address_range("10.0.0.0/24")
        .with_access_from_ip_address("23.45.1.0")
        .with_access_from_azure_services()
        .with_read_access_to_log_entries_from_any_network()
        .with_read_access_to_metrics_from_any_network()
    )
    acls = stage.definition.to_payload()["properties"]["networkAcls"]
    assert acls == {
        # rules without explicit default action: selected networks only
        "defaultAction": "Deny",
        "bypass": "AzureServices, Logging, Metrics",
        "ipRules": [{"value": "23.45.1.0", "action": "Allow"}, {"value": "10.0.0.0/24", "action": "Allow"}],
        "virtualNetworkRules": [{"id": subnet, "action": "Allow"}],
    }


def test_bypass_only_restricts_access(with_create: WithCreate) -> None:
    for setter, bypass in [
        (with_create.with_read_access_to_log_entries_from_any_network, "Logging"),
        (with_create.with_read_access_to_metrics_from_any_network, "Metrics"),
        (with_create.with_access_from_azure_services, "AzureServices"),
    ]:
        with_create.definition.network_rules = None
        acls = setter().definition.to_payload()["properties"]["networkAcls"]
        assert acls["defaultAction"] == "Deny"
        assert acls["bypass"] == bypass


def test_directory_service_is_replaced(with_create: WithCreate) -> None:
    stage = with_create.with_directory_service_none()
    assert isinstance(stage.definition.directory_service, NoDirectoryService)
    ad = stage.with_directory_service_ad()
    assert isinstance(ad, WithActiveDirectory)
    assert isinstance(ad.definition.directory_service, ActiveDirectory)
    ad = (
        ad.with_active_directory_net_bios_domain_name("CONTOSO")
        .with_active_directory_forest_name("contoso.com")
        .with_active_directory_domain_sid("S-1-5-21-1")
        .with_active_directory_domain_name("contoso.com")
        .with_active_directory_domain_guid("aebfc118-9fa9-4732-a21f-d98e41a77ae1")
        .with_active_directory_azure_storage_sid("S-1-5-21-2")
    )
    assert ad.definition.to_payload()["properties"]["azureFilesIdentityBasedAuthentication"] == {
        "directoryServiceOptions": "AD",
        "activeDirectoryProperties": {
            "azureStorageSid": "S-1-5-21-2",
            "domainGuid": "aebfc118-9fa9-4732-a21f-d98e41a77ae1",
            "domainName": "contoso.com",
            "domainSid": "S-1-5-21-1",
            "forestName": "contoso.com",
            "netBiosDomainName": "CONTOSO",
        },
    }
    stage = ad.with_directory_service_aads()
    assert isinstance(stage.definition.directory_service, AzureActiveDirectoryDomainServices)
    assert not hasattr(stage, "with_active_directory_domain_name")
    # the old view can not modify a directory service that is not selected anymore
    with pytest.raises(StorageDefinitionError):
        ad.with_active_directory_domain_name("other.com")
    # a new Active Directory selection does not carry previous properties
    fresh = stage.with_directory_service_ad().definition.directory_service
    assert isinstance(fresh, ActiveDirectory)
    assert fresh.properties.domain_name is None


def test_azure_files_aad_integration(with_create: WithCreate) -> None:
    enabled = with_create.with_azure_files_aad_integration_enabled(True).definition
    assert isinstance(enabled.directory_service, AzureActiveDirectoryDomainServices)
    auth = enabled.to_payload()["properties"]["azureFilesIdentityBasedAuthentication"]
    assert auth == {"directoryServiceOptions": "AADDS"}
    disabled = with_create.with_azure_files_aad_integration_enabled(False).definition
    assert isinstance(disabled.directory_service, NoDirectoryService)


def test_encryption(with_create: WithCreate) -> None:
    stage = with_create.with_blob_encryption().without_file_encryption()
    assert stage.definition.blob_encryption is True
    assert stage.definition.file_encryption is False
    stage = stage.without_blob_encryption().with_file_encryption()
    assert stage.definition.blob_encryption is False
    assert stage.definition.file_encryption is True
    stage = stage.with_encryption_key_from_key_vault("https://myvault.vault.azure.net", "mykey", "v1")
    encryption = stage.definition.to_payload()["properties"]["encryption"]
    assert encryption == {
        "services": {"blob": {"enabled": False}, "file": {"enabled": True}},
        "keySource": KeySource.key_vault.value,
        "keyvaultproperties": {"keyname": "mykey", "keyversion": "v1", "keyvaulturi": "https://myvault.vault.azure.net"},
    }


def test_deprecated_encryption(with_create: WithCreate) -> None:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        stage = with_create.with_encryption()
    assert stage.definition.blob_encryption is True
    assert any(issubclass(w.category, DeprecationWarning) for w in caught)


def test_custom_domain(with_create: WithCreate) -> None:
    domain = AzureCustomDomain(name="www.contoso.com", use_sub_domain_name=True)
    assert with_create.with_custom_domain(domain).definition.custom_domain == domain
    assert with_create.with_custom_domain("www.contoso.com", True).definition.custom_domain == domain
    by_name = with_create.with_custom_domain("example.com").definition
    assert by_name.custom_domain == AzureCustomDomain(name="example.com")
    assert by_name.to_payload()["properties"]["customDomain"] == {"name": "example.com"}


def test_flags_and_routing(with_create: WithCreate) -> None:
    stage = (
        with_create.with_system_assigned_managed_service_identity()
        .with_only_https_traffic()
        .with_hns_enabled(True)
        .enable_large_file_share()
        .with_internet_routing()
        .with_microsoft_routing()
    )
    assert stage.definition.routing_preference == RoutingChoice.microsoft_routing
    payload = stage.definition.to_payload()
    assert payload["identity"] == {"type": "SystemAssigned"}
    assert payload["properties"] == {
        "supportsHttpsTrafficOnly": True,
        "isHnsEnabled": True,
        "largeFileSharesState": "Enabled",
        "routingPreference": {"routingChoice": "MicrosoftRouting"},
    }
    assert stage.with_hns_enabled(False).definition.hns_enabled is False
    assert stage.with_internet_routing().definition.routing_preference == RoutingChoice.internet_routing


def test_blob_storage_scenario(with_create: WithCreate) -> None:
    stage = (
        with_create.with_sku_name_standard_lrs()
        .with_blob_storage_account_kind()
        .with_access_tier(AccessTier.hot)
        .with_blob_encryption()
        .with_tag("env", "prod")
    )
    definition = stage.definition
    assert definition.sku == SkuName.standard_lrs
    assert definition.account_kind == Kind.blob_storage
    assert definition.access_tier == AccessTier.hot
    assert definition.blob_encryption is True
    assert definition.tags == {"env": "prod"}
    # everything else is not defined
    assert definition.file_encryption is None
    assert definition.custom_domain is None
    assert definition.network_rules is None
    assert definition.identity is None
    assert definition.https_traffic_only is None
    assert definition.hns_enabled is None
    assert definition.directory_service is None
    assert definition.large_file_shares_state is None
    assert definition.routing_preference is None
    assert definition.to_payload() == {
        "location": "westeurope",
        "sku": {"name": "Standard_LRS"},
        "kind": "BlobStorage",
        "tags": {"env": "prod"},
        "properties": {
            "accessTier": "Hot",
            "encryption": {"services": {"blob": {"enabled": True}}, "keySource": "Microsoft.Storage"},
        },
    }


def test_create(with_create: WithCreate, azure_client: StaticFileMicrosoftClient) -> None:
    stage = with_create.with_sku_name_standard_lrs().with_blob_storage_account_kind().with_tag("env", "prod")
    account = stage.create()
    assert account.name == "teststorage"
    assert account.sku_name == "Standard_LRS"
    assert account.resource_group_name == "rgtest"
    # existing group: nothing created
    assert azure_client.resource_groups == []
    assert len(azure_client.storage_accounts) == 1
    group, name, payload = azure_client.storage_accounts[0]
    assert (group, name) == ("rgtest", "teststorage")
    assert payload == stage.definition.to_payload()
    # a definition is submitted only once
    assert stage.definition.submitted is True
    with pytest.raises(DefinitionAlreadySubmittedError):
        stage.create()
    with pytest.raises(DefinitionAlreadySubmittedError):
        stage.with_tag("env", "dev")
    assert len(azure_client.storage_accounts) == 1


def test_create_with_new_group(storage_accounts: StorageAccounts, azure_client: StaticFileMicrosoftClient) -> None:
    storage_accounts.define("teststorage").with_region("eastus").with_new_resource_group("newgroup").create()
    assert azure_client.resource_groups == [("newgroup", "eastus")]
    assert azure_client.storage_accounts[0][0] == "newgroup"


def test_create_requires_region_and_group(azure_client: StaticFileMicrosoftClient) -> None:
    stage = WithCreate(StorageAccountDefinition(name="teststorage"), azure_client)
    with pytest.raises(StorageDefinitionError):
        stage.create()
    assert azure_client.storage_accounts == []
    assert stage.definition.submitted is False


def test_from_config(azure_client: StaticFileMicrosoftClient) -> None:
    accounts = StorageAccounts.from_config(AzureConfig(subscription_id="test"))
    assert isinstance(accounts.client, StaticFileMicrosoftClient)
