from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, TypeVar

from azure.core.exceptions import HttpResponseError
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources.models import GenericResource, Identity, ResourceGroup, Sku
from retrying import retry

from fix_azure_storage.config import AzureConfig, AzureCredentials
from fix_azure_storage.types import Json

log = logging.getLogger("fix.azure.storage")
T = TypeVar("T")

StorageAccountPath = (
    "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}"
    "/providers/Microsoft.Storage/storageAccounts/{accountName}"
)


def is_retryable_exception(e: Exception) -> bool:
    if isinstance(e, HttpResponseError):
        error_code = getattr(e.error, "code", None)
        status_code = getattr(e, "status_code", None)

        if error_code == "TooManyRequests" or status_code == 429:
            log.debug(f"Azure API request limit exceeded or throttling, retrying with exponential backoff: {e}")
            return True

    return False


def storage_account_id(subscription_id: str, resource_group: str, account_name: str) -> str:
    return StorageAccountPath.format(
        subscriptionId=subscription_id, resourceGroupName=resource_group, accountName=account_name
    )


class MicrosoftClient(ABC):
    @abstractmethod
    def create_resource_group(self, name: str, location: str) -> Json:
        pass

    @abstractmethod
    def create_storage_account(self, resource_group: str, name: str, payload: Json) -> Json:
        """
        Create the storage account with the given request body.
        Returns the json representation of the created account or raises an HttpResponseError.
        """

    @staticmethod
    def __create_management_client(
        config: AzureConfig,
        credential: Optional[AzureCredentials] = None,
        subscription_id: Optional[str] = None,
    ) -> MicrosoftClient:
        subscription = subscription_id or config.subscription_id
        if subscription is None:
            raise ValueError("No subscription defined: either configure subscription_id or pass it explicitly.")
        return MicrosoftResourceManagementClient(config, credential or config.credentials(), subscription)

    create = __create_management_client


class MicrosoftResourceManagementClient(MicrosoftClient):
    def __init__(self, config: AzureConfig, credential: AzureCredentials, subscription_id: str) -> None:
        self.config = config
        self.credential = credential
        self.subscription_id = subscription_id
        self.resource_management_client = ResourceManagementClient(self.credential, self.subscription_id)

    def create_resource_group(self, name: str, location: str) -> Json:
        try:
            group = self._with_retry(
                lambda: self.resource_management_client.resource_groups.create_or_update(
                    name, ResourceGroup(location=location)
                )
            )
            log.info(f"[Azure] Resource group {name} is available in {location}")
            return group.serialize(keep_readonly=True)  # type: ignore
        except HttpResponseError as e:
            self._log_error("Resource group creation", e)
            raise

    def create_storage_account(self, resource_group: str, name: str, payload: Json) -> Json:
        resource_id = storage_account_id(self.subscription_id, resource_group, name)
        sku = payload.get("sku")
        identity = payload.get("identity")
        resource = GenericResource(
            location=payload.get("location"),
            tags=payload.get("tags"),
            kind=payload.get("kind"),
            properties=payload.get("properties"),
            sku=Sku(name=sku["name"]) if sku else None,
            identity=Identity(type=identity["type"]) if identity else None,
        )
        try:
            log.debug(f"[Azure] Create storage account {resource_id} with api version {self.config.api_version}")
            # throttling can happen on the initial request or while polling: both restart the create
            created = self._with_retry(
                lambda: self.resource_management_client.resources.begin_create_or_update_by_id(
                    resource_id, self.config.api_version, resource
                ).result(timeout=self.config.create_timeout)
            )
        except HttpResponseError as e:
            self._log_error("Storage account creation", e)
            raise
        log.info(f"[Azure] Storage account {resource_id} created.")
        return created.serialize(keep_readonly=True)  # type: ignore

    def _with_retry(self, fn: Callable[[], T]) -> T:
        @retry(  # type: ignore
            stop_max_attempt_number=self.config.max_retry_attempts,
            wait_exponential_multiplier=1000,
            wait_exponential_max=60000,
            retry_on_exception=is_retryable_exception,
        )
        def call() -> T:
            return fn()

        return call()  # type: ignore

    @staticmethod
    def _log_error(action: str, e: HttpResponseError) -> None:
        error_code = (e.error.code if e.error else None) or "Unknown"
        log.warning(f"[Azure] {action} failed: status={e.status_code}, error={error_code}, message={e}")
