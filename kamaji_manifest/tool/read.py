"""Kamaji-manifest read action."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import pathlib
import sys
from typing import cast

import yaml

from kamaji_manifest.config import DEFAULT_PROVIDER_TYPE_NAME, ReadConfig
from kamaji_manifest.data_source import DataStoreManifest
from kamaji_manifest.exceptions import ManifestException
from kamaji_manifest.manifest import read_config

from .format import print_json, print_yaml

_LOGGER = logging.getLogger(__name__)


class ReadAction:
    """Generate the DataStore manifest for a configuration file."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "read",
                help="Generate a DataStore manifest from a configuration file",
                description="""Validate a YAML configuration of DataStore
                    attributes and print the generated manifest.""",
            ),
        )
        args.add_argument(
            "--config",
            "-c",
            type=pathlib.Path,
            required=True,
            help="Path to the YAML configuration of the DataStore attributes",
        )
        args.add_argument(
            "--output",
            "-o",
            choices=["yaml", "json", "state"],
            default="yaml",
            help="Print the manifest as yaml or json, or the state with the "
            "computed attributes",
        )
        args.add_argument(
            "--provider-type-name",
            default=DEFAULT_PROVIDER_TYPE_NAME,
            help="Prefix of the data source type name",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config: pathlib.Path,
        output: str,
        provider_type_name: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        doc = await read_config(config)
        data_source = DataStoreManifest(
            ReadConfig(provider_type_name=provider_type_name)
        )
        response = data_source.read(doc)
        for diag in response.diagnostics:
            print(f"[{diag.severity.upper()}] {diag}", file=sys.stderr)
        if response.has_error or response.output is None:
            raise ManifestException(
                f"Configuration {config} has {len(response.diagnostics)} error(s)"
            )

        _LOGGER.debug("Generated manifest for %s", response.output.id)
        if output == "json":
            print_json(yaml.safe_load(response.output.yaml))
        elif output == "state":
            print_yaml([response.state])
        else:
            print(response.output.yaml, end="")
