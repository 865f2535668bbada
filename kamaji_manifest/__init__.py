"""
kamaji-manifest generates Kamaji DataStore manifests from a declarative
configuration, validated against a fixed schema.
"""

__all__ = [
    "config",
    "data_source",
    "datastore",
    "diagnostics",
    "exceptions",
    "manifest",
    "schema",
    "validators",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
