"""Data sources exposed to a plugin host.

A data source answers three requests from the host: its type name, the schema
of its attributes, and a read of a configuration. A read never raises for a
problem with the configuration, the problems are returned as diagnostics
instead and no state is produced.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Any

from .config import ReadConfig
from .datastore import DataStore, describe
from .diagnostics import Diagnostic, error, has_error
from .exceptions import (
    InputException,
    ObjectNotFoundError,
    SchemaViolation,
    SerializationFailed,
)
from .manifest import ManifestOutput, ManifestProjector
from .schema import SchemaDescriptor

__all__ = [
    "ReadResponse",
    "DataSource",
    "DataStoreManifest",
    "Provider",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class ReadResponse:
    """The result of reading a data source."""

    output: ManifestOutput | None = None
    """The computed attributes, unset when there are errors."""

    state: dict[str, Any] | None = None
    """The configuration with the computed attributes filled in."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    """Problems found while reading the data source."""

    @property
    def has_error(self) -> bool:
        return has_error(self.diagnostics)


class DataSource(ABC):
    """A read-only data source."""

    @abstractmethod
    def metadata(self, provider_type_name: str) -> str:
        """Return the full type name of the data source."""

    @abstractmethod
    def schema(self) -> SchemaDescriptor:
        """Return the schema of the data source attributes."""

    @abstractmethod
    def read(self, config: dict[str, Any]) -> ReadResponse:
        """Read the data source for a configuration."""


class DataStoreManifest(DataSource):
    """Generates the manifest of a Kamaji DataStore."""

    def __init__(self, read_config: ReadConfig | None = None) -> None:
        """Initialize DataStoreManifest."""
        self._read_config = read_config or ReadConfig()
        self._projector = ManifestProjector(self._read_config.resource_type)

    def metadata(self, provider_type_name: str) -> str:
        type_name = self._read_config.resource_type.type_name
        return f"{provider_type_name}_{type_name}_manifest"

    def schema(self) -> SchemaDescriptor:
        return describe()

    def parse(self, config: dict[str, Any]) -> DataStore:
        """Validate a configuration and parse it into a DataStore record."""
        diagnostics = self.schema().validate(config)
        if has_error(diagnostics):
            raise SchemaViolation(diagnostics)
        return DataStore.parse_doc(config)

    def read(self, config: dict[str, Any]) -> ReadResponse:
        _LOGGER.debug(
            "Read resource %s", self.metadata(self._read_config.provider_type_name)
        )
        try:
            record = self.parse(config)
            output = self._projector.project(record)
        except SchemaViolation as err:
            return ReadResponse(diagnostics=err.diagnostics)
        except InputException as err:
            return ReadResponse(diagnostics=[error("Invalid configuration", str(err))])
        except SerializationFailed as err:
            _LOGGER.debug("Failed to serialize %s: %s", config, err.cause)
            return ReadResponse(
                diagnostics=[error("Unable to marshal YAML", str(err.cause))]
            )
        state = {**config, "id": output.id, "yaml": output.yaml}
        return ReadResponse(output=output, state=state)


class Provider:
    """A collection of data sources sharing a type name prefix."""

    def __init__(
        self,
        type_name: str | None = None,
        data_sources: list[DataSource] | None = None,
    ) -> None:
        """Initialize Provider."""
        self._type_name = type_name or ReadConfig().provider_type_name
        if data_sources is None:
            data_sources = [DataStoreManifest(ReadConfig(self._type_name))]
        self._data_sources = {
            data_source.metadata(self._type_name): data_source
            for data_source in data_sources
        }

    @property
    def type_name(self) -> str:
        return self._type_name

    def data_sources(self) -> dict[str, DataSource]:
        """Return the data sources keyed by full type name."""
        return dict(self._data_sources)

    def data_source(self, type_name: str) -> DataSource:
        """Return the data source with the full type name."""
        if not (data_source := self._data_sources.get(type_name)):
            raise ObjectNotFoundError(f"Data source {type_name} not found")
        return data_source
