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
Module enumeration.

Modules are the submodule paths declared in .gitmodules, unless the
configuration lists them explicitly.
"""

import os
from typing import List, Optional

from .errors import SetupError
from lgxpack.utils.cmd.cmd_util import exec_command

GITMODULES_FILE_NAME = ".gitmodules"


def read_gitmodules(repo_dir: str) -> List[str]:
    """
    Submodule paths of repo_dir in declaration order.

    Raises:
        SetupError: If .gitmodules is missing or cannot be read
    """
    gitmodules = os.path.join(repo_dir, GITMODULES_FILE_NAME)
    if not os.path.isfile(gitmodules):
        raise SetupError(f"No .gitmodules found in {repo_dir}")

    err_code, output = exec_command(
        ["git", "config", "--file", gitmodules, "--get-regexp", "path"]
    )
    # git exits with 1 when no key matches
    if err_code not in (0, 1):
        raise SetupError(f"Failed to read {gitmodules}: {output.strip()}")

    modules = []
    for line in output.splitlines():
        parts = line.strip().split(None, 1)
        if len(parts) == 2 and parts[0].endswith(".path"):
            modules.append(parts[1].strip())
    return modules


def enumerate_modules(repo_dir: str, configured: Optional[List[str]] = None,
                      only: Optional[List[str]] = None) -> List[str]:
    """
    Ordered module identifiers to process.

    Args:
        repo_dir: Repository root holding .gitmodules
        configured: Explicit module list from configuration, wins over .gitmodules
        only: Optional subset to keep, enumeration order is preserved

    Raises:
        SetupError: If no modules are found or `only` names unknown modules
    """
    if configured:
        modules = list(configured)
    else:
        modules = read_gitmodules(repo_dir)

    if not modules:
        raise SetupError("No module paths found in .gitmodules")

    if only:
        unknown = [m for m in only if m not in modules]
        if unknown:
            raise SetupError(f"Unknown modules: {', '.join(unknown)}")
        modules = [m for m in modules if m in only]

    return modules
