"""Kamaji-manifest schema action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast, Any

from kamaji_manifest.data_source import DataStoreManifest

from .format import TableFormatter, print_json, print_yaml

_LOGGER = logging.getLogger(__name__)

TABLE_COLUMNS = ["path", "kind", "cardinality", "validators"]


class SchemaAction:
    """Print the attributes accepted by the DataStore manifest data source."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "schema",
                help="Print the schema of the DataStore attributes",
                description="Print the attributes accepted in a DataStore "
                "configuration, with their cardinality and validation rules.",
            ),
        )
        args.add_argument(
            "--output",
            "-o",
            choices=["table", "yaml", "json"],
            default="table",
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        schema = DataStoreManifest().schema()
        if output == "yaml":
            print_yaml([schema.to_dict()])
            return
        if output == "json":
            print_json(schema.to_dict())
            return

        results: list[dict[str, Any]] = []
        for path, attr in schema.walk():
            validators = ", ".join(v.description for v in attr.validators)
            results.append(
                {
                    "path": path,
                    "kind": attr.kind,
                    "cardinality": attr.cardinality,
                    "validators": validators or "-",
                }
            )
        TableFormatter(TABLE_COLUMNS).print(results)
