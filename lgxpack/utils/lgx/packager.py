#
# Copyright 2024 lgxpack Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""
lgx binary wrapper.

The lgx tool owns the archive format. This wrapper only knows two of its
subcommands:

    lgx create <name>
    lgx add <package> --variant <id> --files <dir> --main <path> -y
"""

import os
from typing import Optional

from lgxpack.pipeline.errors import PackagerError, SetupError
from lgxpack.pipeline.lgx_archive import LGX_EXTENSION
from lgxpack.utils.cmd.cmd_util import exec_command


class LgxPackager:
    """Create lgx packages and add variants through the lgx binary."""

    def __init__(self, lgx_path: Optional[str], verbose: bool = False):
        """
        Args:
            lgx_path: Path to the lgx binary
            verbose: Print the output of every lgx invocation
        """
        if not lgx_path:
            raise SetupError("LGX env var (or [package].lgx) must point to the lgx binary")
        self.lgx_path = lgx_path
        self.verbose = verbose

    def check(self):
        """Fail before any module is processed if the binary is missing."""
        if os.sep in self.lgx_path:
            if not os.path.isfile(self.lgx_path):
                raise SetupError(f"lgx binary not found at {self.lgx_path}")
            if not os.access(self.lgx_path, os.X_OK):
                raise SetupError(f"lgx binary at {self.lgx_path} is not executable")

    def _run(self, args, cwd=None) -> str:
        command = [self.lgx_path] + args
        err_code, output = exec_command(command, cwd=cwd)
        if self.verbose and output:
            print(output)
        if err_code != 0:
            raise PackagerError(
                f"'{' '.join(command)}' failed with exit code {err_code}\n{output.strip()}"
            )
        return output

    def create(self, name: str, output_dir: str) -> str:
        """
        Create an empty package <output_dir>/<name>.lgx.

        A stale file with the same name is removed first.

        Returns:
            Path to the created package
        """
        os.makedirs(output_dir, exist_ok=True)
        package_path = os.path.join(output_dir, f"{name}{LGX_EXTENSION}")
        if os.path.exists(package_path):
            os.remove(package_path)

        self._run(["create", name], cwd=output_dir)

        if not os.path.isfile(package_path):
            raise PackagerError(f"lgx create did not produce {package_path}")
        return package_path

    def add(self, package_path: str, variant: str, files_dir: str, main: str):
        """Append one variant's files to an existing package."""
        self._run([
            "add", package_path,
            "--variant", variant,
            "--files", os.path.join(files_dir, "."),
            "--main", main,
            "-y",
        ])
