from __future__ import annotations

import io
import runpy
from contextlib import redirect_stdout

from rosella import cli
from rosella.app_info import APP_NAME


def test_main_module_exposes_the_cli_runner() -> None:
    namespace = runpy.run_module("rosella.__main__", run_name="rosella_entrypoint_test")
    assert namespace["run"] is cli.run


def test_version_flag_exits_cleanly() -> None:
    stream = io.StringIO()
    with redirect_stdout(stream):
        code = cli.run(["--version"])

    assert code == 0
    assert stream.getvalue().startswith(f"{APP_NAME} ")
