from typing import ClassVar, Optional, Union

from attr import define, field
from azure.identity import DefaultAzureCredential, ClientSecretCredential

from fix_azure_storage.json import from_json
from fix_azure_storage.types import Json

AzureCredentials = Union[DefaultAzureCredential, ClientSecretCredential]


@define
class AzureClientSecretConfig:
    kind: ClassVar[str] = "azure_client_secret"
    tenant_id: str = field(metadata={"description": "Azure tenant ID"})
    client_id: str = field(metadata={"description": "Azure client ID"})
    client_secret: str = field(metadata={"description": "Azure client secret"})


@define
class AzureConfig:
    kind: ClassVar[str] = "azure_storage"

    subscription_id: Optional[str] = field(
        default=None, metadata={"description": "The subscription where storage accounts are created."}
    )
    client_secret: Optional[AzureClientSecretConfig] = field(
        default=None,
        metadata={
            "description": "If you can not provide access via the environment, define access with a client secret.\nIf no secret is provided the default credential chain will be used.\nSee https://docs.microsoft.com/en-us/azure/developer/python/azure-sdk-authenticate?tabs=cmd#environment-variables for more information."  # noqa: E501
        },
    )
    api_version: str = field(
        default="2023-01-01", metadata={"description": "Microsoft.Storage API version used to create accounts."}
    )
    max_retry_attempts: int = field(
        default=10,
        metadata={"description": "Number of attempts for throttled requests, with exponential backoff in between."},
    )
    create_timeout: Optional[int] = field(
        default=None,
        metadata={"description": "Seconds to wait for the creation to finish. Wait without limit if not defined."},
    )

    def credentials(self) -> AzureCredentials:
        if cs := self.client_secret:
            return ClientSecretCredential(
                tenant_id=cs.tenant_id,
                client_id=cs.client_id,
                client_secret=cs.client_secret,
            )
        # Increase the process timeout to ensure proper handling of credentials acquired via the azure cli.
        return DefaultAzureCredential(process_timeout=300)

    @staticmethod
    def from_json(js: Json) -> "AzureConfig":
        return from_json(js, AzureConfig)
