from fix_azure_storage.azure_client import MicrosoftClient, MicrosoftResourceManagementClient
from fix_azure_storage.config import AzureConfig, AzureClientSecretConfig
from fix_azure_storage.definition import (
    Blank,
    DefinitionAlreadySubmittedError,
    StorageAccounts,
    StorageDefinitionError,
    WithActiveDirectory,
    WithCreate,
    WithCreateAndAccessTier,
    WithGroup,
)
from fix_azure_storage.resource.model import AccessTier, AzureCustomDomain, Kind, SkuName, StorageAccountDefinition
from fix_azure_storage.resource.storage import AzureStorageAccount

__title__ = "fix-azure-storage"
__description__ = "Staged definition and creation of Azure storage accounts."
__version__ = "0.1.0"
__license__ = "Apache 2.0"

__all__ = [
    "AccessTier",
    "AzureClientSecretConfig",
    "AzureConfig",
    "AzureCustomDomain",
    "AzureStorageAccount",
    "Blank",
    "DefinitionAlreadySubmittedError",
    "Kind",
    "MicrosoftClient",
    "MicrosoftResourceManagementClient",
    "SkuName",
    "StorageAccountDefinition",
    "StorageAccounts",
    "StorageDefinitionError",
    "WithActiveDirectory",
    "WithCreate",
    "WithCreateAndAccessTier",
    "WithGroup",
]
