"""Test helpers for kamaji-manifest tools."""

import pytest

from kamaji_manifest.tool.kamaji_manifest import main


def run_command(args: list[str], capsys: pytest.CaptureFixture[str]) -> tuple[str, str]:
    """Run the command line tool and return the captured stdout and stderr."""
    main(args)
    captured = capsys.readouterr()
    return captured.out, captured.err
