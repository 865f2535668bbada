"""The Kamaji DataStore resource.

A DataStore describes a shared backing database (etcd, MySQL or PostgreSQL)
used by Kamaji tenant control planes. This module holds the schema of the
attributes accepted to describe a DataStore and the typed records parsed from
a validated configuration.

Credentials and certificates may be supplied either inline as base64 encoded
content, or as a reference to a key of a Kubernetes Secret, but never both.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from mashumaro import field_options
from mashumaro.types import SerializableType

from .exceptions import InputException
from .manifest import DATA_STORE, BaseManifest, Metadata, Resource
from .schema import Cardinality, FieldSchema, Kind, SchemaDescriptor
from .validators import (
    AnnotationValidator,
    Base64Validator,
    ExactlyOneOf,
    LabelValidator,
    LengthAtLeast,
    NameValidator,
    OneOf,
    SizeAtLeast,
)

__all__ = [
    "DATA_STORE",
    "describe",
    "Driver",
    "SecretReference",
    "Credential",
    "InlineContent",
    "SecretContent",
    "CertificateKeyPair",
    "BasicAuth",
    "TLSConfig",
    "DataStoreSpec",
    "DataStore",
]


class Driver(StrEnum):
    """The driver used to connect to the shared datastore."""

    ETCD = "etcd"
    MYSQL = "MySQL"
    POSTGRESQL = "PostgreSQL"


@dataclass
class SecretReference(BaseManifest):
    """A key within a Kubernetes Secret."""

    name: str
    """The name of the Secret."""

    namespace: str
    """The namespace of the Secret."""

    key_path: str = field(metadata=field_options(alias="keyPath"))
    """The key of the Secret where the content is stored."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "SecretReference":
        """Parse a SecretReference from a configuration."""
        for key in ("name", "namespace", "key_path"):
            if not doc.get(key):
                raise InputException(f"Invalid {cls} missing {key}: {doc}")
        return cls(name=doc["name"], namespace=doc["namespace"], key_path=doc["key_path"])


class Credential(SerializableType, ABC):
    """Sensitive content, either inline or stored in a Secret."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Credential":
        """Parse a Credential from a configuration."""
        content = doc.get("content")
        secret_reference = doc.get("secret_reference")
        if (content is None) == (secret_reference is None):
            raise InputException(
                f"Invalid {cls} requires exactly one of content or secret_reference: {doc}"
            )
        if content is not None:
            return InlineContent(content)
        return SecretContent(SecretReference.parse_doc(secret_reference))

    @abstractmethod
    def _serialize(self) -> dict[str, Any]:
        """Return the manifest representation."""

    @classmethod
    def _deserialize(cls, value: dict[str, Any]) -> "Credential":
        if (content := value.get("content")) is not None:
            return InlineContent(content)
        if (secret_reference := value.get("secretReference")) is not None:
            return SecretContent(SecretReference.from_dict(secret_reference))
        raise InputException(f"Invalid {cls} missing content or secretReference: {value}")


@dataclass(frozen=True)
class InlineContent(Credential):
    """Bare content of the file, base64 encoded."""

    content: str

    def _serialize(self) -> dict[str, Any]:
        return {"content": self.content}


@dataclass(frozen=True)
class SecretContent(Credential):
    """Content stored in a key of a Secret."""

    secret_reference: SecretReference

    def _serialize(self) -> dict[str, Any]:
        return {"secretReference": self.secret_reference.compact_dict()}


@dataclass
class CertificateKeyPair(BaseManifest):
    """A certificate and its private key."""

    certificate: Credential
    """The certificate."""

    private_key: Credential | None = field(
        metadata=field_options(alias="privateKey"), default=None
    )
    """The private key, optional for the certificate authority."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "CertificateKeyPair":
        """Parse a CertificateKeyPair from a configuration."""
        if not (certificate := doc.get("certificate")):
            raise InputException(f"Invalid {cls} missing certificate: {doc}")
        private_key: Credential | None = None
        if private_key_doc := doc.get("private_key"):
            private_key = Credential.parse_doc(private_key_doc)
        return cls(
            certificate=Credential.parse_doc(certificate),
            private_key=private_key,
        )


@dataclass
class BasicAuth(BaseManifest):
    """The username and password pair for an authenticated data store."""

    username: Credential
    password: Credential

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "BasicAuth":
        """Parse a BasicAuth from a configuration."""
        if not (username := doc.get("username")):
            raise InputException(f"Invalid {cls} missing username: {doc}")
        if not (password := doc.get("password")):
            raise InputException(f"Invalid {cls} missing password: {doc}")
        return cls(
            username=Credential.parse_doc(username),
            password=Credential.parse_doc(password),
        )


@dataclass
class TLSConfig(BaseManifest):
    """The TLS configuration required to connect to the data store."""

    certificate_authority: CertificateKeyPair = field(
        metadata=field_options(alias="certificateAuthority")
    )
    """The Certificate Authority certificate and private key."""

    client_certificate: CertificateKeyPair = field(
        metadata=field_options(alias="clientCertificate")
    )
    """The client certificate and private key pair."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "TLSConfig":
        """Parse a TLSConfig from a configuration."""
        if not (certificate_authority := doc.get("certificate_authority")):
            raise InputException(f"Invalid {cls} missing certificate_authority: {doc}")
        if not (client_certificate := doc.get("client_certificate")):
            raise InputException(f"Invalid {cls} missing client_certificate: {doc}")
        return cls(
            certificate_authority=CertificateKeyPair.parse_doc(certificate_authority),
            client_certificate=CertificateKeyPair.parse_doc(client_certificate),
        )


@dataclass
class DataStoreSpec(BaseManifest):
    """The desired state of a DataStore."""

    driver: Driver
    """The driver to use to connect to the shared datastore."""

    endpoints: list[str]
    """The endpoints (bare IP/FQDN and port) to connect to."""

    basic_auth: BasicAuth | None = field(
        metadata=field_options(alias="basicAuth"), default=None
    )
    """Username and password, when authentication is enabled."""

    tls_config: TLSConfig | None = field(
        metadata=field_options(alias="tlsConfig"), default=None
    )
    """TLS configuration to connect to the data store in a secure way."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "DataStoreSpec":
        """Parse a DataStoreSpec from a configuration."""
        if not (driver_name := doc.get("driver")):
            raise InputException(f"Invalid {cls} missing driver: {doc}")
        if not (endpoints := doc.get("endpoints")):
            raise InputException(f"Invalid {cls} missing endpoints: {doc}")
        try:
            driver = Driver(driver_name)
        except ValueError as err:
            raise InputException(
                f"Invalid {cls} unsupported driver: {driver_name}"
            ) from err
        basic_auth: BasicAuth | None = None
        if basic_auth_doc := doc.get("basic_auth"):
            basic_auth = BasicAuth.parse_doc(basic_auth_doc)
        tls_config: TLSConfig | None = None
        if tls_config_doc := doc.get("tls_config"):
            tls_config = TLSConfig.parse_doc(tls_config_doc)
        return cls(
            driver=driver,
            endpoints=list(endpoints),
            basic_auth=basic_auth,
            tls_config=tls_config,
        )


@dataclass
class DataStore(Resource):
    """A representation of a Kamaji DataStore."""

    spec: DataStoreSpec | None = None
    """The desired state of the DataStore."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "DataStore":
        """Parse a DataStore from a validated configuration.

        The computed `id` and `yaml` attributes are not part of the record.
        """
        if not (metadata := doc.get("metadata")):
            raise InputException(f"Invalid {cls} missing metadata: {doc}")
        spec: DataStoreSpec | None = None
        if spec_doc := doc.get("spec"):
            spec = DataStoreSpec.parse_doc(spec_doc)
        return cls(metadata=Metadata.parse_doc(metadata), spec=spec)


def _secret_reference() -> FieldSchema:
    return FieldSchema(
        name="secret_reference",
        kind=Kind.OBJECT,
        cardinality=Cardinality.OPTIONAL,
        attributes=(
            FieldSchema(
                name="key_path",
                kind=Kind.STRING,
                cardinality=Cardinality.REQUIRED,
                description=(
                    "Name of the key for the given Secret reference where the "
                    "content is stored. This value is mandatory."
                ),
                validators=(LengthAtLeast(1),),
            ),
            FieldSchema(
                name="name",
                kind=Kind.STRING,
                cardinality=Cardinality.REQUIRED,
                description=(
                    "name is unique within a namespace to reference a secret "
                    "resource."
                ),
            ),
            FieldSchema(
                name="namespace",
                kind=Kind.STRING,
                cardinality=Cardinality.REQUIRED,
                description=(
                    "namespace defines the space within which the secret name "
                    "must be unique."
                ),
            ),
        ),
    )


def _credential(name: str, cardinality: Cardinality, description: str = "") -> FieldSchema:
    """Return the schema of content given inline or as a Secret reference."""
    return FieldSchema(
        name=name,
        kind=Kind.OBJECT,
        cardinality=cardinality,
        description=description,
        validators=(ExactlyOneOf("content", "secret_reference"),),
        attributes=(
            FieldSchema(
                name="content",
                kind=Kind.STRING,
                cardinality=Cardinality.OPTIONAL,
                description=(
                    "Bare content of the file, base64 encoded. Mutually exclusive "
                    "with the SecretReference value."
                ),
                validators=(Base64Validator(),),
            ),
            _secret_reference(),
        ),
    )


def _key_pair(
    name: str, private_key: Cardinality, description: str
) -> FieldSchema:
    return FieldSchema(
        name=name,
        kind=Kind.OBJECT,
        cardinality=Cardinality.REQUIRED,
        description=description,
        attributes=(
            _credential("certificate", Cardinality.REQUIRED),
            _credential("private_key", private_key),
        ),
    )


_METADATA = FieldSchema(
    name="metadata",
    kind=Kind.OBJECT,
    cardinality=Cardinality.REQUIRED,
    description=(
        "Data that helps uniquely identify this object. See "
        "https://github.com/kubernetes/community/blob/master/contributors/devel/"
        "sig-architecture/api-conventions.md#metadata for more details."
    ),
    attributes=(
        FieldSchema(
            name="name",
            kind=Kind.STRING,
            cardinality=Cardinality.REQUIRED,
            description=(
                "Unique identifier for this object. See "
                "https://kubernetes.io/docs/concepts/overview/working-with-objects/"
                "names/#names for more details."
            ),
            validators=(NameValidator(), LengthAtLeast(1)),
        ),
        FieldSchema(
            name="labels",
            kind=Kind.MAP,
            cardinality=Cardinality.OPTIONAL,
            description=(
                "Keys and values that can be used to organize and categorize "
                "objects. See https://kubernetes.io/docs/concepts/overview/"
                "working-with-objects/labels/ for more details."
            ),
            validators=(LabelValidator(),),
        ),
        FieldSchema(
            name="annotations",
            kind=Kind.MAP,
            cardinality=Cardinality.OPTIONAL,
            description=(
                "Keys and values that can be used by external tooling to store "
                "and retrieve arbitrary metadata about this object. See "
                "https://kubernetes.io/docs/concepts/overview/working-with-objects/"
                "annotations/ for more details."
            ),
            validators=(AnnotationValidator(),),
        ),
    ),
)

_SPEC = FieldSchema(
    name="spec",
    kind=Kind.OBJECT,
    cardinality=Cardinality.OPTIONAL,
    description="DataStoreSpec defines the desired state of DataStore.",
    attributes=(
        FieldSchema(
            name="basic_auth",
            kind=Kind.OBJECT,
            cardinality=Cardinality.OPTIONAL,
            description=(
                "In case of authentication enabled for the given data store, "
                "specifies the username and password pair. This value is optional."
            ),
            attributes=(
                _credential("username", Cardinality.REQUIRED),
                _credential("password", Cardinality.REQUIRED),
            ),
        ),
        FieldSchema(
            name="driver",
            kind=Kind.STRING,
            cardinality=Cardinality.REQUIRED,
            description="The driver to use to connect to the shared datastore.",
            validators=(OneOf(*(str(driver) for driver in Driver)),),
        ),
        FieldSchema(
            name="endpoints",
            kind=Kind.LIST,
            cardinality=Cardinality.REQUIRED,
            description=(
                "List of the endpoints to connect to the shared datastore. No need "
                "for protocol, just bare IP/FQDN and port."
            ),
            validators=(SizeAtLeast(1),),
        ),
        FieldSchema(
            name="tls_config",
            kind=Kind.OBJECT,
            cardinality=Cardinality.OPTIONAL,
            description=(
                "Defines the TLS/SSL configuration required to connect to the data "
                "store in a secure way."
            ),
            attributes=(
                _key_pair(
                    "certificate_authority",
                    Cardinality.OPTIONAL,
                    "Retrieve the Certificate Authority certificate and private key, "
                    "such as bare content of the file, or a SecretReference. The key "
                    "reference is required since etcd authentication is based on "
                    "certificates, and Kamaji is responsible in creating this.",
                ),
                _key_pair(
                    "client_certificate",
                    Cardinality.REQUIRED,
                    "Specifies the SSL/TLS key and private key pair used to connect "
                    "to the data store.",
                ),
            ),
        ),
    ),
)

_SCHEMA = SchemaDescriptor(
    description="DataStore is the Schema for the datastores API.",
    attributes=(
        FieldSchema(
            name="id",
            kind=Kind.STRING,
            cardinality=Cardinality.COMPUTED,
            description="Contains the value 'metadata.name'.",
            markdown_description="Contains the value `metadata.name`.",
        ),
        FieldSchema(
            name="yaml",
            kind=Kind.STRING,
            cardinality=Cardinality.COMPUTED,
            description="The generated manifest in YAML format.",
        ),
        _METADATA,
        _SPEC,
    ),
)


def describe() -> SchemaDescriptor:
    """Return the schema of the attributes describing a DataStore."""
    return _SCHEMA
