"""
Staged definition of an Azure storage account.

Every stage is a view on the same `StorageAccountDefinition`. A stage only offers the
calls that are valid at this point of the definition, e.g. the access tier can only be
set directly after the blob storage account kind has been chosen:

    account = (
        StorageAccounts(client)
        .define("mystorage")
        .with_region("westeurope")
        .with_new_resource_group("my-group")
        .with_sku_name_standard_lrs()
        .with_blob_storage_account_kind()
        .with_access_tier(AccessTier.cool)
        .with_tag("env", "prod")
        .create()
    )

Settings that are marked as beta (encryption, network access, managed identity, https only,
hierarchical namespace, Azure Files AAD integration) follow the current Azure API and are
subject to change.
"""

import logging
import warnings
from typing import Mapping, Optional, Type, TypeVar, Union, overload

from fix_azure_storage.azure_client import MicrosoftClient
from fix_azure_storage.config import AzureConfig
from fix_azure_storage.resource.model import (
    AccessTier,
    ActiveDirectory,
    AzureActiveDirectoryDomainServices,
    AzureActiveDirectoryProperties,
    AzureCustomDomain,
    AzureEncryptionService,
    AzureKeyVaultProperties,
    AzureManagedServiceIdentity,
    Bypass,
    DefaultAction,
    KeySource,
    Kind,
    LargeFileSharesState,
    NoDirectoryService,
    RoutingChoice,
    SkuName,
    StorageAccountDefinition,
)
from fix_azure_storage.resource.storage import AzureStorageAccount

log = logging.getLogger("fix.azure.storage")

StageT = TypeVar("StageT", bound="DefinitionStage")


class StorageDefinitionError(Exception):
    """Raised when a storage account definition is used in a way it does not allow."""


class DefinitionAlreadySubmittedError(StorageDefinitionError):
    pass


class DefinitionStage:
    def __init__(self, definition: StorageAccountDefinition, client: MicrosoftClient) -> None:
        self.definition = definition
        self.client = client

    def _update(self) -> StorageAccountDefinition:
        if self.definition.submitted:
            raise DefinitionAlreadySubmittedError(f"Storage account {self.definition.name} has already been created.")
        return self.definition

    def _next(self, stage: Type[StageT]) -> StageT:
        return stage(self.definition, self.client)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.definition!r})"


class Blank(DefinitionStage):
    def with_region(self, region: str) -> "WithGroup":
        """
        Specifies the region of the storage account, e.g. "westeurope" or "West Europe".
        """
        self._update().region = region.replace(" ", "").lower()
        return self._next(WithGroup)


class WithGroup(DefinitionStage):
    def with_existing_resource_group(self, name: str) -> "WithCreate":
        definition = self._update()
        definition.resource_group = name
        definition.new_resource_group = False
        return self._next(WithCreate)

    def with_new_resource_group(self, name: Optional[str] = None) -> "WithCreate":
        """
        The resource group is created in the region of the account before the account itself.
        Without a name, the group is named after the account.
        """
        definition = self._update()
        definition.resource_group = name or f"rg{definition.name}"
        definition.new_resource_group = True
        return self._next(WithCreate)


class WithCreate(DefinitionStage):
    # sku
    def _sku(self, sku: SkuName) -> "WithCreate":
        self._update().sku = sku
        return self._next(WithCreate)

    def with_sku_name_standard_lrs(self) -> "WithCreate":
        return self._sku(SkuName.standard_lrs)

    def with_sku_name_standard_grs(self) -> "WithCreate":
        return self._sku(SkuName.standard_grs)

    def with_sku_name_standard_ragrs(self) -> "WithCreate":
        return self._sku(SkuName.standard_ragrs)

    def with_sku_name_standard_zrs(self) -> "WithCreate":
        return self._sku(SkuName.standard_zrs)

    def with_sku_name_standard_gzrs(self) -> "WithCreate":
        return self._sku(SkuName.standard_gzrs)

    def with_sku_name_standard_ragzrs(self) -> "WithCreate":
        return self._sku(SkuName.standard_ragzrs)

    def with_sku_name_premium_lrs(self) -> "WithCreate":
        return self._sku(SkuName.premium_lrs)

    def with_sku_name_premium_zrs(self) -> "WithCreate":
        return self._sku(SkuName.premium_zrs)

    # account kind
    def _account_kind(self, kind: Kind) -> StorageAccountDefinition:
        definition = self._update()
        definition.account_kind = kind
        # access tier is only available for blob storage accounts
        definition.access_tier = AccessTier.hot if kind == Kind.blob_storage else None
        return definition

    def with_general_purpose_account_kind(self) -> "WithCreate":
        self._account_kind(Kind.storage)
        return self._next(WithCreate)

    def with_general_purpose_account_kind_v2(self) -> "WithCreate":
        self._account_kind(Kind.storage_v2)
        return self._next(WithCreate)

    def with_blob_storage_account_kind(self) -> "WithCreateAndAccessTier":
        """
        Blob storage accounts use the Hot access tier unless another one is chosen.
        """
        self._account_kind(Kind.blob_storage)
        return self._next(WithCreateAndAccessTier)

    def with_block_blob_storage_account_kind(self) -> "WithCreate":
        self._account_kind(Kind.block_blob_storage)
        return self._next(WithCreate)

    def with_file_storage_account_kind(self) -> "WithCreate":
        self._account_kind(Kind.file_storage)
        return self._next(WithCreate)

    # encryption (beta)
    def with_blob_encryption(self) -> "WithCreate":
        self._update().encryption_settings().services.blob = AzureEncryptionService(enabled=True)
        return self._next(WithCreate)

    def without_blob_encryption(self) -> "WithCreate":
        self._update().encryption_settings().services.blob = AzureEncryptionService(enabled=False)
        return self._next(WithCreate)

    def with_file_encryption(self) -> "WithCreate":
        self._update().encryption_settings().services.file = AzureEncryptionService(enabled=True)
        return self._next(WithCreate)

    def without_file_encryption(self) -> "WithCreate":
        self._update().encryption_settings().services.file = AzureEncryptionService(enabled=False)
        return self._next(WithCreate)

    def with_encryption(self) -> "WithCreate":
        warnings.warn(
            "with_encryption() is deprecated, use with_blob_encryption() instead.", DeprecationWarning, stacklevel=2
        )
        return self.with_blob_encryption()

    def with_encryption_key_from_key_vault(self, key_vault_uri: str, key_name: str, key_version: str) -> "WithCreate":
        """
        Use a customer managed key stored in Key Vault to encrypt the account.
        The values are checked by Azure when the account is created.
        """
        encryption = self._update().encryption_settings()
        encryption.key_source = KeySource.key_vault
        encryption.key_vault_properties = AzureKeyVaultProperties(
            key_name=key_name, key_version=key_version, key_vault_uri=key_vault_uri
        )
        return self._next(WithCreate)

    # custom domain
    @overload
    def with_custom_domain(self, custom_domain: AzureCustomDomain) -> "WithCreate": ...

    @overload
    def with_custom_domain(self, custom_domain: str, use_sub_domain: Optional[bool] = None) -> "WithCreate": ...

    def with_custom_domain(
        self, custom_domain: Union[AzureCustomDomain, str], use_sub_domain: Optional[bool] = None
    ) -> "WithCreate":
        if isinstance(custom_domain, AzureCustomDomain):
            domain = custom_domain
        else:
            domain = AzureCustomDomain(name=custom_domain, use_sub_domain_name=use_sub_domain)
        self._update().custom_domain = domain
        return self._next(WithCreate)

    # network access (beta)
    def with_access_from_network_subnet(self, subnet_id: str) -> "WithCreate":
        self._update().network_rule_set().add_virtual_network_rule(subnet_id)
        return self._next(WithCreate)

    def with_access_from_ip_address(self, ip_address: str) -> "WithCreate":
        self._update().network_rule_set().add_ip_rule(ip_address)
        return self._next(WithCreate)

    def with_access_from_ip_address_range(self, ip_address_cidr: str) -> "WithCreate":
        self._update().network_rule_set().add_ip_rule(ip_address_cidr)
        return self._next(WithCreate)

    def with_access_from_azure_services(self) -> "WithCreate":
        self._update().network_rule_set().add_bypass(Bypass.azure_services)
        return self._next(WithCreate)

    def with_read_access_to_log_entries_from_any_network(self) -> "WithCreate":
        self._update().network_rule_set().add_bypass(Bypass.logging)
        return self._next(WithCreate)

    def with_read_access_to_metrics_from_any_network(self) -> "WithCreate":
        self._update().network_rule_set().add_bypass(Bypass.metrics)
        return self._next(WithCreate)

    def with_access_from_selected_networks(self) -> "WithCreate":
        """
        Deny access by default: only the configured subnets and IP ranges are allowed.
        """
        self._update().network_rule_set().default_action = DefaultAction.deny
        return self._next(WithCreate)

    def with_access_from_all_networks(self) -> "WithCreate":
        self._update().network_rule_set().default_action = DefaultAction.allow
        return self._next(WithCreate)

    # identity and flags (beta)
    def with_system_assigned_managed_service_identity(self) -> "WithCreate":
        self._update().identity = AzureManagedServiceIdentity()
        return self._next(WithCreate)

    def with_only_https_traffic(self) -> "WithCreate":
        self._update().https_traffic_only = True
        return self._next(WithCreate)

    def with_hns_enabled(self, enabled: bool) -> "WithCreate":
        self._update().hns_enabled = enabled
        return self._next(WithCreate)

    def with_azure_files_aad_integration_enabled(self, enabled: bool) -> "WithCreate":
        self._update().directory_service = AzureActiveDirectoryDomainServices() if enabled else NoDirectoryService()
        return self._next(WithCreate)

    def enable_large_file_share(self) -> "WithCreate":
        self._update().large_file_shares_state = LargeFileSharesState.enabled
        return self._next(WithCreate)

    # directory service
    def with_directory_service_none(self) -> "WithCreate":
        self._update().directory_service = NoDirectoryService()
        return self._next(WithCreate)

    def with_directory_service_aads(self) -> "WithCreate":
        self._update().directory_service = AzureActiveDirectoryDomainServices()
        return self._next(WithCreate)

    def with_directory_service_ad(self) -> "WithActiveDirectory":
        self._update().directory_service = ActiveDirectory()
        return self._next(WithActiveDirectory)

    # routing preference
    def with_microsoft_routing(self) -> "WithCreate":
        self._update().routing_preference = RoutingChoice.microsoft_routing
        return self._next(WithCreate)

    def with_internet_routing(self) -> "WithCreate":
        self._update().routing_preference = RoutingChoice.internet_routing
        return self._next(WithCreate)

    # tags
    def with_tag(self, key: str, value: str) -> "WithCreate":
        self._update().tags[key] = value
        return self._next(WithCreate)

    def with_tags(self, tags: Mapping[str, str]) -> "WithCreate":
        self._update().tags.update(tags)
        return self._next(WithCreate)

    def create(self) -> AzureStorageAccount:
        """
        Create the storage account in Azure.
        The definition can not be changed or submitted again once the account has been created.
        """
        definition = self._update()
        if definition.region is None or definition.resource_group is None:
            raise StorageDefinitionError(f"Storage account {definition.name} needs a region and a resource group.")
        if definition.new_resource_group:
            self.client.create_resource_group(definition.resource_group, definition.region)
        log.info(f"[Azure] Create storage account {definition.name} in {definition.resource_group}")
        js = self.client.create_storage_account(definition.resource_group, definition.name, definition.to_payload())
        definition.submitted = True
        return AzureStorageAccount.from_api(js)


class WithCreateAndAccessTier(WithCreate):
    def with_access_tier(self, access_tier: AccessTier) -> WithCreate:
        """
        Specifies the access tier used for billing.
        Azure allows to change the access tier only once every 7 days.
        """
        definition = self._update()
        if definition.account_kind != Kind.blob_storage:
            raise StorageDefinitionError("The access tier can only be set for the blob storage account kind.")
        definition.access_tier = access_tier
        return self._next(WithCreate)


class WithActiveDirectory(WithCreate):
    def _properties(self) -> AzureActiveDirectoryProperties:
        service = self._update().directory_service
        if not isinstance(service, ActiveDirectory):
            raise StorageDefinitionError("Active Directory is no longer the selected directory service.")
        return service.properties

    def with_active_directory_azure_storage_sid(self, azure_storage_sid: str) -> "WithActiveDirectory":
        self._properties().azure_storage_sid = azure_storage_sid
        return self

    def with_active_directory_domain_guid(self, domain_guid: str) -> "WithActiveDirectory":
        self._properties().domain_guid = domain_guid
        return self

    def with_active_directory_domain_name(self, domain_name: str) -> "WithActiveDirectory":
        self._properties().domain_name = domain_name
        return self

    def with_active_directory_domain_sid(self, domain_sid: str) -> "WithActiveDirectory":
        self._properties().domain_sid = domain_sid
        return self

    def with_active_directory_forest_name(self, forest_name: str) -> "WithActiveDirectory":
        self._properties().forest_name = forest_name
        return self

    def with_active_directory_net_bios_domain_name(self, net_bios_domain_name: str) -> "WithActiveDirectory":
        self._properties().net_bios_domain_name = net_bios_domain_name
        return self


class StorageAccounts:
    """
    Entry point to define new storage accounts.
    """

    def __init__(self, client: MicrosoftClient) -> None:
        self.client = client

    @staticmethod
    def from_config(config: AzureConfig) -> "StorageAccounts":
        return StorageAccounts(MicrosoftClient.create(config))

    def define(self, name: str) -> Blank:
        log.debug(f"[Azure] Define storage account {name}")
        return Blank(StorageAccountDefinition(name=name), self.client)
