"""Tests for the validators library."""

import base64

import pytest

from kamaji_manifest.diagnostics import Severity
from kamaji_manifest.validators import (
    AnnotationValidator,
    Base64Validator,
    ExactlyOneOf,
    LabelValidator,
    LengthAtLeast,
    NameValidator,
    OneOf,
    SizeAtLeast,
)


@pytest.mark.parametrize(
    "name",
    [
        "etcd-store",
        "a",
        "kamaji.example.com",
        "store-0",
        "0store",
    ],
)
def test_valid_name(name: str) -> None:
    """Test names that are valid DNS subdomains."""
    assert NameValidator().validate("metadata.name", name) == []


@pytest.mark.parametrize(
    "name",
    [
        "",
        "Etcd",
        "etcd_store",
        "-etcd",
        "etcd-",
        "etcd..store",
        "a" * 254,
    ],
)
def test_invalid_name(name: str) -> None:
    """Test names that are not valid DNS subdomains."""
    diagnostics = NameValidator().validate("metadata.name", name)
    assert diagnostics
    assert all(diag.path == "metadata.name" for diag in diagnostics)
    assert all(diag.severity == Severity.ERROR for diag in diagnostics)


def test_valid_labels() -> None:
    """Test label keys with and without prefixes and empty values."""
    labels = {
        "app": "kamaji",
        "app.kubernetes.io/name": "etcd",
        "tier": "",
        "version": "v1.2_3-rc.0",
    }
    assert LabelValidator().validate("metadata.labels", labels) == []


@pytest.mark.parametrize(
    ("labels", "summary"),
    [
        ({"-app": "kamaji"}, "Invalid Label Key"),
        ({"/app": "kamaji"}, "Invalid Label Key"),
        ({"a/b/c": "kamaji"}, "Invalid Label Key"),
        ({"Example.COM/app": "kamaji"}, "Invalid Label Key"),
        ({"example.com/": "kamaji"}, "Invalid Label Key"),
        ({"a" * 64: "kamaji"}, "Invalid Label Key"),
        ({"app": "kamaji!"}, "Invalid Label Value"),
        ({"app": "a" * 64}, "Invalid Label Value"),
        ({"app": "-kamaji"}, "Invalid Label Value"),
    ],
)
def test_invalid_labels(labels: dict[str, str], summary: str) -> None:
    """Test label maps with invalid keys or values."""
    diagnostics = LabelValidator().validate("metadata.labels", labels)
    assert diagnostics
    assert {diag.summary for diag in diagnostics} == {summary}


def test_valid_annotations() -> None:
    """Test annotation values are free form."""
    annotations = {
        "example.com/description": "Shared etcd for the tenant control planes!",
        "note": "",
    }
    assert AnnotationValidator().validate("metadata.annotations", annotations) == []


def test_invalid_annotation_key() -> None:
    """Test annotation keys must be qualified names."""
    diagnostics = AnnotationValidator().validate(
        "metadata.annotations", {"not a key": "value"}
    )
    assert [diag.summary for diag in diagnostics] == ["Invalid Annotation Key"]


def test_annotations_too_long() -> None:
    """Test the total size limit of annotations."""
    diagnostics = AnnotationValidator().validate(
        "metadata.annotations", {"large": "x" * (256 * 1024)}
    )
    assert [diag.summary for diag in diagnostics] == ["Annotations Too Long"]


def test_annotations_too_long_multibyte() -> None:
    """Test the annotation size limit counts encoded bytes."""
    diagnostics = AnnotationValidator().validate(
        "metadata.annotations", {"k": "é" * (128 * 1024)}
    )
    assert [diag.summary for diag in diagnostics] == ["Annotations Too Long"]
    assert "got 262145" in diagnostics[0].detail


@pytest.mark.parametrize(
    "value",
    [
        "bm90YmFzZTY0",
        "cm9vdA==",
        "",
        base64.encodebytes(b"x" * 100).decode(),
        "Y2VydGlm\r\naWNhdGU=\r\n",
    ],
)
def test_valid_base64(value: str) -> None:
    """Test base64 encoded content."""
    assert Base64Validator().validate("content", value) == []


@pytest.mark.parametrize("value", ["not base64!", "cm9vdA=", "é"])
def test_invalid_base64(value: str) -> None:
    """Test content that is not base64 encoded."""
    diagnostics = Base64Validator().validate("content", value)
    assert [diag.summary for diag in diagnostics] == ["Invalid Base64 Value"]


def test_length_at_least() -> None:
    """Test minimum string length."""
    validator = LengthAtLeast(1)
    assert validator.validate("key_path", "ca.crt") == []
    diagnostics = validator.validate("key_path", "")
    assert len(diagnostics) == 1
    assert diagnostics[0].detail == "string length must be at least 1, got: 0"


def test_one_of() -> None:
    """Test values are one of the fixed set, case sensitive."""
    validator = OneOf("etcd", "MySQL", "PostgreSQL")
    assert validator.values == ("etcd", "MySQL", "PostgreSQL")
    assert validator.validate("spec.driver", "MySQL") == []
    diagnostics = validator.validate("spec.driver", "mysql")
    assert len(diagnostics) == 1
    assert str(diagnostics[0]) == (
        'spec.driver: Invalid Attribute Value Match: value must be one of: '
        '["etcd" "MySQL" "PostgreSQL"], got: "mysql"'
    )


def test_size_at_least() -> None:
    """Test minimum list size."""
    validator = SizeAtLeast(1)
    assert validator.validate("spec.endpoints", ["10.0.0.1:2379"]) == []
    assert len(validator.validate("spec.endpoints", [])) == 1


@pytest.mark.parametrize(
    ("value", "valid"),
    [
        ({"content": "cm9vdA=="}, True),
        ({"secret_reference": {"name": "secret"}}, True),
        ({"content": "cm9vdA==", "secret_reference": {"name": "secret"}}, False),
        ({}, False),
        ({"content": None, "secret_reference": None}, False),
    ],
)
def test_exactly_one_of(value: dict[str, str], valid: bool) -> None:
    """Test an object sets exactly one of the attributes."""
    diagnostics = ExactlyOneOf("content", "secret_reference").validate(
        "spec.basic_auth.password", value
    )
    assert (not diagnostics) == valid
