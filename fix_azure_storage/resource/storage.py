import logging
from datetime import datetime
from typing import ClassVar, Dict, Optional, List

from attr import define, field

from fix_azure_storage.json import from_json
from fix_azure_storage.types import Json

log = logging.getLogger("fix.azure.storage")


@define(eq=False, slots=False)
class AzureStorageSku:
    kind: ClassVar[str] = "azure_storage_sku"
    name: Optional[str] = field(default=None, metadata={'description': 'The SKU name. Required for account creation; optional for update.'})  # fmt: skip
    tier: Optional[str] = field(default=None, metadata={"description": "The SKU tier. This is based on the SKU name."})


@define(eq=False, slots=False)
class AzureStorageIdentity:
    kind: ClassVar[str] = "azure_storage_identity"
    type: Optional[str] = field(default=None, metadata={"description": "The type of managed identity."})
    principal_id: Optional[str] = field(default=None, metadata={'description': 'The principal ID of the system assigned identity.'})  # fmt: skip
    tenant_id: Optional[str] = field(default=None, metadata={'description': 'The tenant ID of the system assigned identity.'})  # fmt: skip


@define(eq=False, slots=False)
class AzureEndpoints:
    kind: ClassVar[str] = "azure_endpoints"
    blob: Optional[str] = field(default=None, metadata={"description": "Gets the blob endpoint."})
    dfs: Optional[str] = field(default=None, metadata={"description": "Gets the dfs endpoint."})
    file: Optional[str] = field(default=None, metadata={"description": "Gets the file endpoint."})
    queue: Optional[str] = field(default=None, metadata={"description": "Gets the queue endpoint."})
    table: Optional[str] = field(default=None, metadata={"description": "Gets the table endpoint."})
    web: Optional[str] = field(default=None, metadata={"description": "Gets the web endpoint."})


@define(eq=False, slots=False)
class AzureStorageAccountProperties:
    kind: ClassVar[str] = "azure_storage_account_properties"
    provisioning_state: Optional[str] = field(default=None, metadata={'description': 'The status of the storage account at the time the operation was called.'})  # fmt: skip
    creation_time: Optional[datetime] = field(default=None, metadata={'description': 'Gets the creation date and time of the storage account in UTC.'})  # fmt: skip
    access_tier: Optional[str] = field(default=None, metadata={'description': 'Required for storage accounts where kind = BlobStorage. The access tier is used for billing.'})  # fmt: skip
    supports_https_traffic_only: Optional[bool] = field(default=None, metadata={'description': 'Allows https traffic only to storage service if sets to true.'})  # fmt: skip
    is_hns_enabled: Optional[bool] = field(default=None, metadata={'description': 'Account HierarchicalNamespace enabled if sets to true.'})  # fmt: skip
    large_file_shares_state: Optional[str] = field(default=None, metadata={'description': 'Allow large file shares if sets to Enabled. It cannot be disabled once it is enabled.'})  # fmt: skip
    primary_location: Optional[str] = field(default=None, metadata={'description': 'Gets the location of the primary data center for the storage account.'})  # fmt: skip
    primary_endpoints: Optional[AzureEndpoints] = field(default=None, metadata={'description': 'The URIs that are used to perform a retrieval of a public blob, queue, table, web or dfs object.'})  # fmt: skip
    secondary_location: Optional[str] = field(default=None, metadata={'description': 'Gets the location of the geo-replicated secondary for the storage account.'})  # fmt: skip
    status_of_primary: Optional[str] = field(default=None, metadata={'description': 'Gets the status indicating whether the primary location of the storage account is available or unavailable.'})  # fmt: skip
    encryption: Optional[Json] = field(default=None, metadata={"description": "The encryption settings as returned by Azure."})  # fmt: skip
    network_acls: Optional[Json] = field(default=None, metadata={"description": "Network rule set as returned by Azure."})  # fmt: skip
    custom_domain: Optional[Json] = field(default=None, metadata={'description': 'The custom domain assigned to this storage account.'})  # fmt: skip
    azure_files_identity_based_authentication: Optional[Json] = field(default=None, metadata={'description': 'Settings for Azure Files identity based authentication.'})  # fmt: skip
    routing_preference: Optional[Json] = field(default=None, metadata={'description': 'Routing preference defines the type of network, either microsoft or internet routing to be used to deliver the user data.'})  # fmt: skip


@define(eq=False, slots=False)
class AzureStorageAccount:
    """
    A storage account as returned by Azure after it has been created.
    """

    kind: ClassVar[str] = "azure_storage_account"
    id: Optional[str] = field(default=None, metadata={"description": "Fully qualified resource ID."})
    name: Optional[str] = field(default=None, metadata={"description": "The name of the resource."})
    type: Optional[str] = field(default=None, metadata={'description': 'The type of the resource. E.g. Microsoft.Compute/virtualMachines or Microsoft.Storage/storageAccounts '})  # fmt: skip
    location: Optional[str] = field(default=None, metadata={'description': 'The geo-location where the resource lives'})  # fmt: skip
    tags: Dict[str, str] = field(factory=dict, metadata={"description": "Resource tags."})
    sku: Optional[AzureStorageSku] = field(default=None, metadata={"description": "The SKU of the storage account."})
    resource_kind: Optional[str] = field(default=None, metadata={"description": "Gets the Kind.", "json_name": "kind"})  # fmt: skip
    identity: Optional[AzureStorageIdentity] = field(default=None, metadata={"description": "Identity for the resource."})  # fmt: skip
    properties: AzureStorageAccountProperties = field(factory=AzureStorageAccountProperties)

    @property
    def sku_name(self) -> Optional[str]:
        return self.sku.name if self.sku else None

    @property
    def resource_group_name(self) -> Optional[str]:
        return self.extract_part("resourceGroups")

    @property
    def resource_subscription_id(self) -> Optional[str]:
        return self.extract_part("subscriptions")

    def extract_part(self, part: str) -> Optional[str]:
        """
        Extracts a specific part from the resource ID.
        For "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}/...",
        extract_part("subscriptions") returns the subscription ID.
        """
        id_parts: List[str] = (self.id or "").split("/")
        try:
            index = next(i for i, p in enumerate(id_parts) if p.lower() == part.lower())
            return id_parts[index + 1] or None
        except (StopIteration, IndexError):
            return None

    @classmethod
    def from_api(cls, js: Json) -> "AzureStorageAccount":
        try:
            return from_json(js, cls)
        except Exception as e:
            log.warning(f"[Azure] Failed to parse json into {cls.__name__}: {e}. Source: {js}")
            raise
