"""Helpers for invoking the CLI in tests."""

import json
from typing import Any

from click.testing import CliRunner, Result

from codenav.cli.main import cli

runner = CliRunner()


def invoke(*args: str, **env: str) -> Result:
    """Run the CLI with a wide terminal so tables never wrap."""
    return runner.invoke(cli, list(args), env={"COLUMNS": "200", **env})


def invoke_json(*args: str, **env: str) -> Any:
    """Run a command with --json and decode stdout."""
    result = invoke(*args, "--json", **env)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)
