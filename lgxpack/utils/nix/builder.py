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
Module builder.

Runs the configured build command inside a module directory and copies
the resulting library output into the build directory, laid out as
<build_dir>/<variant>/<module>/ for the package assembler.
"""

import os
import shutil
import stat
import tempfile
from typing import List

from lgxpack.pipeline.errors import BuildError
from lgxpack.utils.cmd.cmd_util import exec_command


def copy_tree_contents(src: str, dst: str) -> int:
    """
    Copy the files below src into dst, following symlinks.

    Files are made owner-writable since nix store outputs are read-only.

    Returns:
        Number of files copied
    """
    count = 0
    for root, dirs, files in os.walk(src, followlinks=True):
        rel = os.path.relpath(root, src)
        target_dir = dst if rel == "." else os.path.join(dst, rel)
        os.makedirs(target_dir, exist_ok=True)
        for name in files:
            target = os.path.join(target_dir, name)
            shutil.copyfile(os.path.join(root, name), target)
            mode = os.stat(os.path.join(root, name)).st_mode
            os.chmod(target, stat.S_IMODE(mode) | stat.S_IWUSR | stat.S_IRUSR)
            count += 1
    return count


class NixBuilder:
    """Build a module and collect its library output directory."""

    def __init__(self, command: List[str], library_subdir: str = "lib", verbose: bool = False):
        """
        Args:
            command: Build command, "{out}" is replaced with the output link path
            library_subdir: Directory inside the build output holding the
                libraries, the output root is used if it does not exist
            verbose: Print the build output
        """
        self.command = list(command)
        self.library_subdir = library_subdir
        self.verbose = verbose

    def build(self, module: str, module_dir: str, dest_dir: str) -> str:
        """
        Build module_dir and copy its library output to dest_dir.

        dest_dir is replaced, so stale files of a previous build never
        leak into the package.

        Returns:
            dest_dir

        Raises:
            BuildError: If the command fails or produces no output
        """
        if not os.path.isdir(module_dir):
            raise BuildError(module, f"module directory {module_dir} does not exist")

        with tempfile.TemporaryDirectory(prefix="lgxpack-build-") as temp_dir:
            out_link = os.path.join(temp_dir, "result")
            command = [c.replace("{out}", out_link) for c in self.command]

            print(f"   $ {' '.join(command)}")
            err_code, output = exec_command(command, cwd=module_dir)
            if self.verbose and output:
                print(output)
            if err_code != 0:
                raise BuildError(module, f"exit code {err_code}\n{output.strip()}")

            if not os.path.exists(out_link):
                raise BuildError(module, f"build produced no output at {out_link}")

            library_dir = out_link
            if self.library_subdir and os.path.isdir(os.path.join(out_link, self.library_subdir)):
                library_dir = os.path.join(out_link, self.library_subdir)

            if os.path.exists(dest_dir):
                shutil.rmtree(dest_dir)
            os.makedirs(dest_dir)
            copied = copy_tree_contents(library_dir, dest_dir)

        if copied == 0:
            raise BuildError(module, f"build output {library_dir} contains no files")
        return dest_dir
