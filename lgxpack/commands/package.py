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

import os
import argparse

from lgxpack.commands._common import (
    add_common_arguments,
    fail,
    load_config,
    load_modules,
    parse_command_args,
)
from lgxpack.pipeline.assembler import AssemblyMode
from lgxpack.pipeline.errors import LgxPackError
from lgxpack.pipeline.index import INDEX_FILE_NAME
from lgxpack.pipeline import runner
from lgxpack.utils.console import print_banner, print_warning
from lgxpack.utils.context.command import CliCommand
from lgxpack.utils.context.context import CliContext
from lgxpack.utils.context.namespace import CliNameSpace
from lgxpack.utils.lgx import LgxPackager


class Package(CliCommand):
    def description(self) -> str:
        return """Merge single-variant lgx packages into multi-variant ones.

Every module declared in .gitmodules (or [package].modules) is looked up
in the artifacts directory. The manifests of all its variants must match,
ignoring the platform specific "main" field. A fresh package is then
created with the lgx tool and each variant's files are added to it.

EXPECTED LAYOUT:
    <artifacts-dir>/<variant>/<module>/<package>.lgx

EXAMPLES:
    # Merge everything under ./artifacts
    LGX=/path/to/lgx lgxpack package

    # Only some modules, only Linux variants
    lgxpack package --lgx ./lgx --modules modules/wallet --variants linux-amd64,linux-arm64

ENVIRONMENT VARIABLES:
    LGX                 Path to the lgx binary
    ARTIFACTS_DIR       Downloaded artifacts (default: artifacts)
    LGXPACK_OUTPUT_DIR  Output directory (default: output)

OUTPUT:
    <output>/<name>.lgx     One multi-variant package per module
    <output>/list.json      Package index, sorted by module
        """

    def cli(self) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="lgxpack package",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--artifacts-dir",
            dest="artifacts_dir",
            type=str,
            help="Directory with <variant>/<module>/*.lgx (default: artifacts)",
        )
        parser.add_argument(
            "--output",
            dest="output_dir",
            type=str,
            help="Output directory for packages and list.json (default: output)",
        )
        parser.add_argument(
            "--lgx",
            type=str,
            help="Path to the lgx binary (default: $LGX)",
        )
        add_common_arguments(parser)
        return parse_command_args(parser, __file__)

    def exec(self, context: CliContext, args: CliNameSpace):
        print_banner("LGXPACK Package - Merge Single-Variant Packages")

        try:
            config = load_config(context, args)
            packager = LgxPackager(config.lgx, verbose=args.verbose)
            packager.check()
            if not os.path.isdir(config.artifacts_path):
                print_warning(f"Artifacts directory {config.artifacts_path} does not exist")
            modules = load_modules(config, args)

            print(config.get_config_summary())
            print(f"Artifacts: {config.artifacts_path}")

            _, results = runner.run(config, AssemblyMode.MERGE, modules, packager)
        except LgxPackError as e:
            fail(e)

        packaged = {result.module for result in results}
        skipped = [m for m in modules if m not in packaged]
        print()
        print_banner("Package Summary")
        for result in results:
            line = f"  ✅ {result.package_filename}: {', '.join(result.variants) or '-'}"
            if result.skipped:
                line += f" (skipped: {', '.join(result.skipped)})"
            print(line)
        for module in skipped:
            print(f"  ⚠️  {module} (no artifacts)")

        print("\nAll modules packaged successfully.")
        print(f"LGX packages created in {config.output_path}")
        print(f"Package list written to {os.path.join(config.output_path, INDEX_FILE_NAME)}")
