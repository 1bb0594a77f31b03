#!/usr/bin/env python3
"""
TFUPGRADER RULE TABLES
----------------------
Static migration rules for the 0.x -> 1.x provider upgrade.

Supported declared types are closed enumerations; anything not listed is
left alone by the rename logic. The same declared type may rename a
different field depending on whether it appears as a resource or as a
data source (e.g. `juju_model`).

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Type


class BlockKind(str, Enum):
    RESOURCE = "resource"
    DATA = "data"
    OUTPUT = "output"
    VARIABLE = "variable"
    TERRAFORM = "terraform"


class ResourceType(str, Enum):
    APPLICATION = "juju_application"
    OFFER = "juju_offer"
    SSH_KEY = "juju_ssh_key"
    ACCESS_MODEL = "juju_access_model"
    ACCESS_SECRET = "juju_access_secret"
    INTEGRATION = "juju_integration"
    SECRET = "juju_secret"
    MACHINE = "juju_machine"


class DataSourceType(str, Enum):
    MODEL = "juju_model"
    APPLICATION = "juju_application"
    SECRET = "juju_secret"
    MACHINE = "juju_machine"


@dataclass(frozen=True)
class FieldRename:
    source: str
    target: str


MODEL_TO_UUID = FieldRename(source="model", target="model_uuid")
NAME_TO_UUID = FieldRename(source="name", target="uuid")

RESOURCE_RENAMES: Mapping[ResourceType, FieldRename] = MappingProxyType({
    ResourceType.APPLICATION: MODEL_TO_UUID,
    ResourceType.OFFER: MODEL_TO_UUID,
    ResourceType.SSH_KEY: MODEL_TO_UUID,
    ResourceType.ACCESS_MODEL: MODEL_TO_UUID,
    ResourceType.ACCESS_SECRET: MODEL_TO_UUID,
    ResourceType.INTEGRATION: MODEL_TO_UUID,
    ResourceType.SECRET: MODEL_TO_UUID,
    ResourceType.MACHINE: MODEL_TO_UUID,
})

DATA_SOURCE_RENAMES: Mapping[DataSourceType, FieldRename] = MappingProxyType({
    DataSourceType.MODEL: NAME_TO_UUID,
    DataSourceType.APPLICATION: MODEL_TO_UUID,
    DataSourceType.SECRET: MODEL_TO_UUID,
    DataSourceType.MACHINE: MODEL_TO_UUID,
})


class DeprecatedAction(Enum):
    WARN = "warn"         # Semantics changed; an operator has to migrate it
    REMOVE = "remove"     # Field no longer carries meaning
    RENAME = "rename"     # Same value, new key


@dataclass(frozen=True)
class DeprecatedField:
    name: str
    action: DeprecatedAction
    replacement: Optional[str] = None


SERIES_TO_BASE = DeprecatedField("series", DeprecatedAction.RENAME, replacement="base")

DEPRECATED_FIELDS: Mapping[ResourceType, Tuple[DeprecatedField, ...]] = MappingProxyType({
    ResourceType.APPLICATION: (
        DeprecatedField("placement", DeprecatedAction.WARN, replacement="machines"),
        DeprecatedField("principal", DeprecatedAction.REMOVE),
        SERIES_TO_BASE,
    ),
    ResourceType.MACHINE: (SERIES_TO_BASE,),
})

# Provider requirements
PROVIDER_NAME = "juju"
UPGRADED_VERSION_CONSTRAINT = 'version = "~> 1.0"'
VERSION_ZERO_PATTERN = re.compile(r'version\s*=\s*"\s*(?:~>|>=|<=|!=|>|<|=)?\s*0\.[^"]*"')


def _lookup(enum_type: Type[Enum], table: Mapping, declared_type: str):
    try:
        return table.get(enum_type(declared_type))
    except ValueError:
        return None


def resource_rename(declared_type: str) -> Optional[FieldRename]:
    return _lookup(ResourceType, RESOURCE_RENAMES, declared_type)


def data_source_rename(declared_type: str) -> Optional[FieldRename]:
    return _lookup(DataSourceType, DATA_SOURCE_RENAMES, declared_type)


def deprecated_fields(declared_type: str) -> Tuple[DeprecatedField, ...]:
    return _lookup(ResourceType, DEPRECATED_FIELDS, declared_type) or ()
