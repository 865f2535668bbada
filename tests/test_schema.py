"""Tests for the schema library."""

from typing import Any

import pytest

from kamaji_manifest.datastore import describe
from kamaji_manifest.exceptions import SchemaDefinitionError
from kamaji_manifest.schema import Cardinality, FieldSchema, Kind, SchemaDescriptor
from kamaji_manifest.validators import LengthAtLeast


def _string(name: str, cardinality: Cardinality = Cardinality.OPTIONAL) -> FieldSchema:
    return FieldSchema(name=name, kind=Kind.STRING, cardinality=cardinality)


def test_describe_is_idempotent() -> None:
    """Test the schema is the same structure on every call."""
    assert describe() is describe()
    assert describe().to_dict() == describe().to_dict()


def test_describe_check() -> None:
    """Test the DataStore schema is self-consistent."""
    describe().check()


def test_describe_paths() -> None:
    """Test the attribute paths of the DataStore schema."""
    paths = [path for path, _ in describe().walk()]
    assert paths[:7] == [
        "id",
        "yaml",
        "metadata",
        "metadata.name",
        "metadata.labels",
        "metadata.annotations",
        "spec",
    ]
    assert "spec.basic_auth.password.secret_reference.key_path" in paths
    assert "spec.tls_config.client_certificate.private_key.content" in paths
    assert len(paths) == len(set(paths))


@pytest.mark.parametrize(
    ("path", "kind", "cardinality"),
    [
        ("id", Kind.STRING, Cardinality.COMPUTED),
        ("yaml", Kind.STRING, Cardinality.COMPUTED),
        ("metadata", Kind.OBJECT, Cardinality.REQUIRED),
        ("metadata.labels", Kind.MAP, Cardinality.OPTIONAL),
        ("spec", Kind.OBJECT, Cardinality.OPTIONAL),
        ("spec.driver", Kind.STRING, Cardinality.REQUIRED),
        ("spec.endpoints", Kind.LIST, Cardinality.REQUIRED),
        (
            "spec.tls_config.certificate_authority.private_key",
            Kind.OBJECT,
            Cardinality.OPTIONAL,
        ),
        (
            "spec.tls_config.client_certificate.private_key",
            Kind.OBJECT,
            Cardinality.REQUIRED,
        ),
    ],
)
def test_attribute(path: str, kind: Kind, cardinality: Cardinality) -> None:
    """Test looking up attributes by path."""
    attr = describe().attribute(path)
    assert attr.kind == kind
    assert attr.cardinality == cardinality
    assert [attr.required, attr.optional, attr.computed].count(True) == 1


def test_attribute_not_found() -> None:
    """Test looking up an attribute that does not exist."""
    with pytest.raises(KeyError):
        describe().attribute("spec.storage")


def test_to_dict() -> None:
    """Test the rendered documentation of an attribute."""
    data = describe().attribute("id").to_dict()
    assert data == {
        "name": "id",
        "kind": "string",
        "description": "Contains the value 'metadata.name'.",
        "markdown_description": "Contains the value `metadata.name`.",
        "required": False,
        "optional": False,
        "computed": True,
    }
    driver = describe().attribute("spec.driver").to_dict()
    assert driver["validators"] == [
        'value must be one of: ["etcd" "MySQL" "PostgreSQL"]'
    ]


@pytest.mark.parametrize(
    ("attributes", "message"),
    [
        ((_string("name"), _string("name")), "Duplicate attribute: name"),
        ((_string("Name"),), "Invalid attribute name"),
        (
            (FieldSchema(name="spec", kind=Kind.OBJECT, cardinality=Cardinality.OPTIONAL),),
            "has no attributes",
        ),
        (
            (
                FieldSchema(
                    name="name",
                    kind=Kind.STRING,
                    cardinality=Cardinality.OPTIONAL,
                    attributes=(_string("child"),),
                ),
            ),
            "may not have attributes",
        ),
        (
            (
                FieldSchema(
                    name="id",
                    kind=Kind.STRING,
                    cardinality=Cardinality.COMPUTED,
                    validators=(LengthAtLeast(1),),
                ),
            ),
            "may not have validators",
        ),
        (
            (
                FieldSchema(
                    name="spec",
                    kind=Kind.OBJECT,
                    cardinality=Cardinality.OPTIONAL,
                    attributes=(_string("a"), _string("a")),
                ),
            ),
            "Duplicate attribute: spec.a",
        ),
    ],
)
def test_check_invalid_schema(
    attributes: tuple[FieldSchema, ...], message: str
) -> None:
    """Test the self-consistency checks of a schema."""
    with pytest.raises(SchemaDefinitionError, match=message):
        SchemaDescriptor(attributes=attributes).check()


def _diagnostics(config: Any) -> list[tuple[str | None, str]]:
    return [(diag.path, diag.summary) for diag in describe().validate(config)]


def test_validate_minimal() -> None:
    """Test a configuration with only the required attributes."""
    assert _diagnostics({"metadata": {"name": "etcd-store"}}) == []


def test_validate_not_a_mapping() -> None:
    """Test a configuration that is not a mapping."""
    assert _diagnostics(["metadata"]) == [(None, "Invalid configuration")]


def test_validate_missing_required() -> None:
    """Test required attributes are reported with their path."""
    assert _diagnostics({"spec": {"endpoints": ["10.0.0.1:2379"]}}) == [
        ("metadata", "Missing required argument"),
        ("spec.driver", "Missing required argument"),
    ]


def test_validate_computed() -> None:
    """Test computed attributes may not be set."""
    assert _diagnostics({"id": "etcd-store", "metadata": {"name": "etcd-store"}}) == [
        ("id", "Invalid Configuration for Read-Only Attribute"),
    ]


def test_validate_computed_unset() -> None:
    """Test computed attributes may be present but unset."""
    config = {"id": None, "yaml": None, "metadata": {"name": "etcd-store"}}
    assert _diagnostics(config) == []


def test_validate_unsupported() -> None:
    """Test unknown attributes are reported."""
    assert _diagnostics(
        {"metadata": {"name": "etcd-store", "namespace": "default"}}
    ) == [
        ("metadata.namespace", "Unsupported argument"),
    ]


@pytest.mark.parametrize(
    ("config", "path"),
    [
        ({"metadata": {"name": 1}}, "metadata.name"),
        ({"metadata": {"name": "a", "labels": ["a"]}}, "metadata.labels"),
        ({"metadata": {"name": "a", "labels": {"a": 1}}}, "metadata.labels"),
        (
            {"metadata": {"name": "a"}, "spec": {"driver": "etcd", "endpoints": "a"}},
            "spec.endpoints",
        ),
        ({"metadata": "etcd-store"}, "metadata"),
    ],
)
def test_validate_wrong_type(config: dict[str, Any], path: str) -> None:
    """Test values of the wrong type are reported."""
    assert _diagnostics(config) == [(path, "Incorrect attribute value type")]


@pytest.mark.parametrize(
    ("config", "detail"),
    [
        (
            {"metadata": {"name": "a", "labels": {"a": None}}},
            "Inappropriate value for attribute 'labels': map of string required, "
            "value of 'a' must be a string, got NoneType",
        ),
        (
            {"metadata": {"name": "a", "annotations": {1: "b"}}},
            "Inappropriate value for attribute 'annotations': map of string "
            "required, key 1 must be a string, got int",
        ),
        (
            {
                "metadata": {"name": "a"},
                "spec": {"driver": "etcd", "endpoints": ["a", 2379]},
            },
            "Inappropriate value for attribute 'endpoints': list of string "
            "required, element 1 must be a string, got int",
        ),
        (
            {"metadata": {"name": "a", "labels": ["a"]}},
            "Inappropriate value for attribute 'labels': map required, got list",
        ),
    ],
)
def test_validate_wrong_element_type(config: dict[str, Any], detail: str) -> None:
    """Test the offending map or list element is named."""
    assert [diag.detail for diag in describe().validate(config)] == [detail]


def test_validate_nested_validators() -> None:
    """Test validators are run on nested attributes."""
    config = {
        "metadata": {"name": "etcd-store"},
        "spec": {
            "driver": "etcd",
            "endpoints": [],
            "basic_auth": {
                "username": {"content": "not base64!"},
                "password": {
                    "content": "cm9vdA==",
                    "secret_reference": {
                        "name": "etcd-credentials",
                        "namespace": "kamaji-system",
                        "key_path": "",
                    },
                },
            },
        },
    }
    assert _diagnostics(config) == [
        ("spec.basic_auth.username.content", "Invalid Base64 Value"),
        ("spec.basic_auth.password", "Invalid Attribute Combination"),
        (
            "spec.basic_auth.password.secret_reference.key_path",
            "Invalid Attribute Value Length",
        ),
        ("spec.endpoints", "Invalid Attribute Value"),
    ]
