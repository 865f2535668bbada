"""Configuration objects for kamaji-manifest."""

from dataclasses import dataclass

from .manifest import DATA_STORE, ResourceType

DEFAULT_PROVIDER_TYPE_NAME = "k8s"


@dataclass
class ReadConfig:
    """Configuration for reading a manifest data source."""

    provider_type_name: str = DEFAULT_PROVIDER_TYPE_NAME
    """Prefix of the data source type names."""

    resource_type: ResourceType = DATA_STORE
    """The apiVersion and kind injected into generated manifests."""
