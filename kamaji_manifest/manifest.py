"""Representation of a Kubernetes resource manifest.

Records are built from a configuration (using the schema's snake_case
attribute names) and serialized using the Kubernetes field names. The
`ManifestProjector` adds the `apiVersion` and `kind` of the resource type and
renders the result as YAML:

    projector = ManifestProjector()
    output = projector.project(record)
    print(output.yaml)
"""

from dataclasses import dataclass
import logging
from pathlib import Path
import re
from typing import Any, cast

import aiofiles
import yaml
from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig

from .exceptions import InputException, SerializationFailed

__all__ = [
    "read_config",
    "BaseManifest",
    "Metadata",
    "Resource",
    "ResourceType",
    "ManifestOutput",
    "ManifestProjector",
    "DATA_STORE",
]

_LOGGER = logging.getLogger(__name__)


def _snake_case(name: str) -> str:
    return re.sub("(?<!^)(?=[A-Z])", "_", name).lower()


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all manifest objects."""

    def compact_dict(self) -> dict[str, Any]:
        """Return a dictionary representation using the Kubernetes field names.

        Unset optional fields are omitted.
        """
        return self.to_dict()

    @classmethod
    def parse_yaml(cls, content: str) -> "BaseManifest":
        """Parse a serialized manifest."""
        if not isinstance(doc := yaml.safe_load(content), dict):
            raise InputException(f"Invalid manifest, expected a mapping: {content}")
        return cls.from_dict(doc)

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass
class Metadata(BaseManifest):
    """Data that helps uniquely identify an object."""

    name: str
    """Unique identifier for the object."""

    labels: dict[str, str] | None = None
    """Keys and values used to organize and categorize objects."""

    annotations: dict[str, str] | None = None
    """Keys and values used by external tooling to store arbitrary metadata."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Metadata":
        """Parse the metadata attributes of a configuration."""
        if not (name := doc.get("name")):
            raise InputException(f"Invalid {cls} missing metadata.name: {doc}")
        return cls(
            name=name,
            labels=doc.get("labels"),
            annotations=doc.get("annotations"),
        )

    def __post_serialize__(self, d: dict[Any, Any]) -> dict[Any, Any]:
        for key in ("labels", "annotations"):
            if key in d and not d[key]:
                del d[key]
        return d


@dataclass
class Resource(BaseManifest):
    """Base class for a Kubernetes resource with object metadata."""

    metadata: Metadata
    """Standard object metadata."""

    @property
    def id_name(self) -> str:
        """Identifier for the resource."""
        return self.metadata.name


@dataclass(frozen=True)
class ResourceType:
    """The group, version and kind of a Kubernetes resource."""

    api_version: str
    """The apiVersion e.g. `kamaji.clastix.io/v1alpha1`."""

    kind: str
    """The kind e.g. `DataStore`."""

    @property
    def group(self) -> str:
        if "/" not in self.api_version:
            return ""
        return self.api_version.split("/", 1)[0]

    @property
    def version(self) -> str:
        return self.api_version.rsplit("/", 1)[-1]

    @property
    def type_name(self) -> str:
        """Data source type name e.g. `kamaji_clastix_io_data_store_v1alpha1`."""
        parts = [self.group.replace(".", "_"), _snake_case(self.kind), self.version]
        return "_".join(part for part in parts if part)


DATA_STORE = ResourceType(api_version="kamaji.clastix.io/v1alpha1", kind="DataStore")


@dataclass(frozen=True)
class ManifestOutput:
    """The computed attributes produced for a resource."""

    id: str
    """Identifier of the resource, the value of `metadata.name`."""

    yaml: str
    """The generated manifest in YAML format."""

    api_version: str
    """The apiVersion injected into the manifest."""

    kind: str
    """The kind injected into the manifest."""


class ManifestProjector:
    """Projects resource records into serialized manifests of a resource type."""

    def __init__(self, resource_type: ResourceType = DATA_STORE) -> None:
        """Initialize ManifestProjector, a Kamaji DataStore by default."""
        self._resource_type = resource_type

    @property
    def resource_type(self) -> ResourceType:
        return self._resource_type

    def manifest(self, record: Resource) -> dict[str, Any]:
        """Return the manifest document for the record."""
        return {
            "apiVersion": self._resource_type.api_version,
            "kind": self._resource_type.kind,
            **record.compact_dict(),
        }

    def project(self, record: Resource) -> ManifestOutput:
        """Return the identifier and YAML manifest for an already validated record."""
        doc = self.manifest(record)
        try:
            content = yaml.safe_dump(doc, sort_keys=True)
        except yaml.YAMLError as err:
            raise SerializationFailed(err) from err
        return ManifestOutput(
            id=record.id_name,
            yaml=content,
            api_version=self._resource_type.api_version,
            kind=self._resource_type.kind,
        )


async def read_config(config_path: Path) -> dict[str, Any]:
    """Return the contents of a YAML configuration file.

    The file holds a single mapping of attribute names to values.
    """
    async with aiofiles.open(str(config_path)) as config_file:
        content = await config_file.read()
    if not content:
        raise InputException(f"Configuration file {config_path} is empty")
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(
            f"Configuration file {config_path} failed to parse as yaml: {err}"
        ) from err
    if not isinstance(doc, dict):
        raise InputException(
            f"Configuration file {config_path} expected a mapping but was "
            f"{type(doc).__name__}"
        )
    _LOGGER.debug("Read configuration %s", config_path)
    return cast(dict[str, Any], doc)
