from __future__ import annotations

import json
import os
from typing import Any, Iterator, List, Tuple

from pytest import fixture

from fix_azure_storage.azure_client import MicrosoftClient
from fix_azure_storage.config import AzureConfig
from fix_azure_storage.definition import StorageAccounts, WithCreate
from fix_azure_storage.types import Json


def load_file(service: str, name: str) -> Json:
    path = os.path.dirname(__file__) + f"/files/{service}/{name}.json"
    with open(path) as f:
        return json.load(f)  # type: ignore


class StaticFileMicrosoftClient(MicrosoftClient):
    """
    Answers with the json files in test/files and records every request.
    """

    def __init__(self) -> None:
        self.resource_groups: List[Tuple[str, str]] = []
        self.storage_accounts: List[Tuple[str, str, Json]] = []

    def create_resource_group(self, name: str, location: str) -> Json:
        self.resource_groups.append((name, location))
        return load_file("storage", "resourceGroups")

    def create_storage_account(self, resource_group: str, name: str, payload: Json) -> Json:
        self.storage_accounts.append((resource_group, name, payload))
        return load_file("storage", "storageAccounts")

    @staticmethod
    def create(*args: Any, **kwargs: Any) -> StaticFileMicrosoftClient:
        return StaticFileMicrosoftClient()


@fixture
def config() -> AzureConfig:
    return AzureConfig(subscription_id="test")


@fixture
def azure_client() -> Iterator[StaticFileMicrosoftClient]:
    original = MicrosoftClient.create
    MicrosoftClient.create = StaticFileMicrosoftClient.create  # type: ignore
    yield StaticFileMicrosoftClient()
    MicrosoftClient.create = original  # type: ignore


@fixture
def storage_accounts(azure_client: StaticFileMicrosoftClient) -> StorageAccounts:
    return StorageAccounts(azure_client)


@fixture
def with_create(storage_accounts: StorageAccounts) -> WithCreate:
    return storage_accounts.define("teststorage").with_region("West Europe").with_existing_resource_group("rgtest")
