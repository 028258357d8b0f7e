"""
Value types of a storage account definition and their ARM json representation.

All attrs classes in this module are serialized with `fix_azure_storage.json.to_json`:
attribute names are converted to camel case, unset (None) values are dropped.
"""

import logging
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Union

from attr import define, field

from fix_azure_storage.json import to_json
from fix_azure_storage.types import Json
from fix_azure_storage.utils import case_insensitive_eq

log = logging.getLogger("fix.azure.storage")


class SkuName(str, Enum):
    standard_lrs = "Standard_LRS"
    standard_grs = "Standard_GRS"
    standard_ragrs = "Standard_RAGRS"
    standard_zrs = "Standard_ZRS"
    standard_gzrs = "Standard_GZRS"
    standard_ragzrs = "Standard_RAGZRS"
    premium_lrs = "Premium_LRS"
    premium_zrs = "Premium_ZRS"


class Kind(str, Enum):
    storage = "Storage"
    storage_v2 = "StorageV2"
    blob_storage = "BlobStorage"
    block_blob_storage = "BlockBlobStorage"
    file_storage = "FileStorage"


class AccessTier(str, Enum):
    hot = "Hot"
    cool = "Cool"


class DefaultAction(str, Enum):
    allow = "Allow"
    deny = "Deny"


class Bypass(str, Enum):
    logging = "Logging"
    metrics = "Metrics"
    azure_services = "AzureServices"


class KeySource(str, Enum):
    storage = "Microsoft.Storage"
    key_vault = "Microsoft.Keyvault"


class DirectoryServiceOptions(str, Enum):
    none = "None"
    aadds = "AADDS"
    ad = "AD"


class LargeFileSharesState(str, Enum):
    disabled = "Disabled"
    enabled = "Enabled"


class RoutingChoice(str, Enum):
    microsoft_routing = "MicrosoftRouting"
    internet_routing = "InternetRouting"


@define
class AzureSku:
    kind: ClassVar[str] = "azure_sku"
    name: SkuName = field(metadata={"description": "The SKU name."})


@define
class AzureManagedServiceIdentity:
    kind: ClassVar[str] = "azure_managed_service_identity"
    type: str = field(
        default="SystemAssigned", metadata={"description": "The type of managed identity assigned to the account."}
    )


@define
class AzureCustomDomain:
    kind: ClassVar[str] = "azure_custom_domain"
    name: str = field(metadata={'description': 'The custom domain name assigned to the storage account. Name is the CNAME source.'})  # fmt: skip
    use_sub_domain_name: Optional[bool] = field(default=None, metadata={'description': 'Indicates whether indirect CName validation is enabled.'})  # fmt: skip


@define
class AzureEncryptionService:
    kind: ClassVar[str] = "azure_encryption_service"
    enabled: bool = field(metadata={'description': 'A boolean indicating whether or not the service encrypts the data as it is stored.'})  # fmt: skip


@define
class AzureEncryptionServices:
    kind: ClassVar[str] = "azure_encryption_services"
    blob: Optional[AzureEncryptionService] = field(default=None, metadata={"description": "Blob service encryption."})
    file: Optional[AzureEncryptionService] = field(default=None, metadata={"description": "File service encryption."})


@define
class AzureKeyVaultProperties:
    kind: ClassVar[str] = "azure_key_vault_properties"
    key_name: str = field(metadata={"description": "The name of KeyVault key.", "json_name": "keyname"})
    key_version: str = field(metadata={"description": "The version of KeyVault key.", "json_name": "keyversion"})
    key_vault_uri: str = field(metadata={"description": "The Uri of KeyVault.", "json_name": "keyvaulturi"})


@define
class AzureStorageEncryption:
    kind: ClassVar[str] = "azure_storage_encryption"
    services: AzureEncryptionServices = field(factory=AzureEncryptionServices, metadata={'description': 'A list of services that support encryption.'})  # fmt: skip
    key_source: KeySource = field(default=KeySource.storage, metadata={'description': 'The encryption keySource (provider).'})  # fmt: skip
    key_vault_properties: Optional[AzureKeyVaultProperties] = field(default=None, metadata={'description': 'Properties of key vault.', 'json_name': 'keyvaultproperties'})  # fmt: skip


@define
class AzureIPRule:
    kind: ClassVar[str] = "azure_ip_rule"
    value: str = field(metadata={'description': 'Specifies the IP or IP range in CIDR format. Only IPV4 address is allowed.'})  # fmt: skip
    action: str = field(default="Allow", metadata={"description": "The action of IP ACL rule."})


@define
class AzureVirtualNetworkRule:
    kind: ClassVar[str] = "azure_virtual_network_rule"
    id: str = field(metadata={'description': 'Resource ID of a subnet, for example: /subscriptions/{subscriptionId}/resourceGroups/{groupName}/providers/Microsoft.Network/virtualNetworks/{vnetName}/subnets/{subnetName}.'})  # fmt: skip
    action: str = field(default="Allow", metadata={"description": "The action of virtual network rule."})


@define
class AzureNetworkRuleSet:
    kind: ClassVar[str] = "azure_network_rule_set"
    default_action: Optional[DefaultAction] = field(default=None, metadata={'description': 'Specifies the default action of allow or deny when no other rules match.'})  # fmt: skip
    bypass: List[Bypass] = field(factory=list, metadata={'description': 'Traffic that is bypassed for Logging/Metrics/AzureServices.'})  # fmt: skip
    ip_rules: List[AzureIPRule] = field(factory=list, metadata={"description": "Sets the IP ACL rules"})
    virtual_network_rules: List[AzureVirtualNetworkRule] = field(factory=list, metadata={'description': 'Sets the virtual network rules'})  # fmt: skip

    def add_ip_rule(self, value: str) -> None:
        if all(rule.value != value for rule in self.ip_rules):
            self.ip_rules.append(AzureIPRule(value=value))

    def add_virtual_network_rule(self, subnet_id: str) -> None:
        if all(not case_insensitive_eq(rule.id, subnet_id) for rule in self.virtual_network_rules):
            self.virtual_network_rules.append(AzureVirtualNetworkRule(id=subnet_id))

    def add_bypass(self, bypass: Bypass) -> None:
        if bypass not in self.bypass:
            self.bypass.append(bypass)

    def to_json(self) -> Json:
        js = to_json(self)
        # the API expects a comma separated list of values, e.g. "Logging, Metrics"
        if self.bypass:
            js["bypass"] = ", ".join(b.value for b in self.bypass)
        else:
            js.pop("bypass", None)
        # rules and bypasses without explicit default action only make sense for selected networks
        if self.default_action is None:
            js["defaultAction"] = DefaultAction.deny.value
        return js


@define
class AzureActiveDirectoryProperties:
    kind: ClassVar[str] = "azure_active_directory_properties"
    azure_storage_sid: Optional[str] = field(default=None, metadata={'description': 'Specifies the security identifier (SID) for Azure Storage.'})  # fmt: skip
    domain_guid: Optional[str] = field(default=None, metadata={"description": "Specifies the domain GUID."})
    domain_name: Optional[str] = field(default=None, metadata={'description': 'Specifies the primary domain that the AD DNS server is authoritative for.'})  # fmt: skip
    domain_sid: Optional[str] = field(default=None, metadata={'description': 'Specifies the security identifier (SID).'})  # fmt: skip
    forest_name: Optional[str] = field(default=None, metadata={'description': 'Specifies the Active Directory forest to get.'})  # fmt: skip
    net_bios_domain_name: Optional[str] = field(default=None, metadata={'description': 'Specifies the NetBIOS domain name.'})  # fmt: skip


# Directory service selection: exactly one of the following variants.


@define(frozen=True)
class NoDirectoryService:
    options: ClassVar[DirectoryServiceOptions] = DirectoryServiceOptions.none


@define(frozen=True)
class AzureActiveDirectoryDomainServices:
    options: ClassVar[DirectoryServiceOptions] = DirectoryServiceOptions.aadds


@define
class ActiveDirectory:
    options: ClassVar[DirectoryServiceOptions] = DirectoryServiceOptions.ad
    properties: AzureActiveDirectoryProperties = field(factory=AzureActiveDirectoryProperties)


DirectoryService = Union[NoDirectoryService, AzureActiveDirectoryDomainServices, ActiveDirectory]


def directory_service_json(service: DirectoryService) -> Json:
    js: Json = {"directoryServiceOptions": service.options.value}
    if isinstance(service, ActiveDirectory):
        js["activeDirectoryProperties"] = to_json(service.properties)
    return js


@define
class StorageAccountDefinition:
    """
    Accumulates the settings of a storage account until it is submitted.
    Only the staged views in `fix_azure_storage.definition` mutate this record.
    """

    kind: ClassVar[str] = "azure_storage_account_definition"
    name: str = field(metadata={"description": "Name of the storage account."})
    region: Optional[str] = field(default=None, metadata={"description": "The location of the account."})
    resource_group: Optional[str] = field(default=None, metadata={'description': 'Name of the resource group that holds the account.'})  # fmt: skip
    new_resource_group: bool = field(default=False, metadata={'description': 'Create the resource group before the account.'})  # fmt: skip
    sku: Optional[SkuName] = field(default=None, metadata={"description": "The SKU of the storage account."})
    account_kind: Optional[Kind] = field(default=None, metadata={"description": "The kind of the storage account."})
    access_tier: Optional[AccessTier] = field(default=None, metadata={'description': 'The access tier used for billing.'})  # fmt: skip
    encryption: Optional[AzureStorageEncryption] = field(default=None, metadata={'description': 'The encryption settings on the storage account.'})  # fmt: skip
    custom_domain: Optional[AzureCustomDomain] = field(default=None, metadata={'description': 'The custom domain assigned to this storage account.'})  # fmt: skip
    network_rules: Optional[AzureNetworkRuleSet] = field(default=None, metadata={"description": "Network rule set"})
    identity: Optional[AzureManagedServiceIdentity] = field(default=None, metadata={"description": "Identity for the resource."})  # fmt: skip
    https_traffic_only: Optional[bool] = field(default=None, metadata={'description': 'Allows https traffic only to storage service if sets to true.'})  # fmt: skip
    hns_enabled: Optional[bool] = field(default=None, metadata={'description': 'Account HierarchicalNamespace enabled if sets to true.'})  # fmt: skip
    directory_service: Optional[DirectoryService] = field(default=None, metadata={'description': 'The directory service used by Azure Files identity based authentication.'})  # fmt: skip
    large_file_shares_state: Optional[LargeFileSharesState] = field(default=None, metadata={'description': 'Allow large file shares if sets to Enabled. It cannot be disabled once it is enabled.'})  # fmt: skip
    routing_preference: Optional[RoutingChoice] = field(default=None, metadata={'description': 'The kind of network routing opted by the user.'})  # fmt: skip
    tags: Dict[str, str] = field(factory=dict, metadata={"description": "Tags of the storage account."})
    submitted: bool = field(default=False, metadata={"description": "Set once the definition was sent to Azure."})

    def encryption_settings(self) -> AzureStorageEncryption:
        if self.encryption is None:
            self.encryption = AzureStorageEncryption()
        return self.encryption

    def network_rule_set(self) -> AzureNetworkRuleSet:
        if self.network_rules is None:
            self.network_rules = AzureNetworkRuleSet()
        return self.network_rules

    @property
    def blob_encryption(self) -> Optional[bool]:
        if self.encryption and (blob := self.encryption.services.blob):
            return blob.enabled
        return None

    @property
    def file_encryption(self) -> Optional[bool]:
        if self.encryption and (file := self.encryption.services.file):
            return file.enabled
        return None

    def to_payload(self) -> Json:
        """
        The request body of a storage account create call.
        Only settings that have been defined are part of the payload.
        """
        properties: Json = {}
        if self.access_tier is not None:
            properties["accessTier"] = self.access_tier.value
        if self.custom_domain is not None:
            properties["customDomain"] = to_json(self.custom_domain)
        if self.encryption is not None:
            properties["encryption"] = to_json(self.encryption)
        if self.network_rules is not None:
            properties["networkAcls"] = self.network_rules.to_json()
        if self.https_traffic_only is not None:
            properties["supportsHttpsTrafficOnly"] = self.https_traffic_only
        if self.hns_enabled is not None:
            properties["isHnsEnabled"] = self.hns_enabled
        if self.directory_service is not None:
            properties["azureFilesIdentityBasedAuthentication"] = directory_service_json(self.directory_service)
        if self.large_file_shares_state is not None:
            properties["largeFileSharesState"] = self.large_file_shares_state.value
        if self.routing_preference is not None:
            properties["routingPreference"] = {"routingChoice": self.routing_preference.value}

        payload: Json = {"location": self.region, "properties": properties}
        if self.sku is not None:
            payload["sku"] = to_json(AzureSku(name=self.sku))
        if self.account_kind is not None:
            payload["kind"] = self.account_kind.value
        if self.identity is not None:
            payload["identity"] = to_json(self.identity)
        if self.tags:
            payload["tags"] = dict(self.tags)
        log.debug(f"[Azure] Payload for storage account {self.name}: {payload}")
        return payload
