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
from lgxpack.pipeline.errors import LgxPackError, SetupError
from lgxpack.pipeline.index import INDEX_FILE_NAME
from lgxpack.pipeline.variants import host_variant
from lgxpack.pipeline import runner
from lgxpack.utils.console import print_banner
from lgxpack.utils.context.command import CliCommand
from lgxpack.utils.context.context import CliContext
from lgxpack.utils.context.namespace import CliNameSpace
from lgxpack.utils.lgx import LgxPackager
from lgxpack.utils.nix import NixBuilder


class Build(CliCommand):
    def description(self) -> str:
        return """Build modules and package their library output.

Each module is built with the configured build command (nix by default)
for the variant of this machine. The library output is copied to
<build-dir>/<variant>/<module>/, then every variant directory found there
is added to a fresh package. Package metadata comes from the module's
metadata.json; a module without a name, or a variant whose main library
is missing, stops the run.

EXAMPLES:
    # Build and package all modules
    LGX=/path/to/lgx lgxpack build

    # Package library directories collected from several machines
    lgxpack build --no-build --build-dir build/libraries

ENVIRONMENT VARIABLES:
    LGX                 Path to the lgx binary
    LGXPACK_BUILD_DIR   Library output directory (default: build/libraries)
    LGXPACK_OUTPUT_DIR  Output directory (default: output)
        """

    def cli(self) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="lgxpack build",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--build-dir",
            dest="build_dir",
            type=str,
            help="Directory with <variant>/<module>/ library output (default: build/libraries)",
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
        parser.add_argument(
            "--variant",
            type=str,
            help="Variant produced by this build (default: detected from the host)",
        )
        parser.add_argument(
            "--no-build",
            action="store_true",
            help="Skip building, package existing library directories only",
        )
        add_common_arguments(parser)
        return parse_command_args(parser, __file__)

    def exec(self, context: CliContext, args: CliNameSpace):
        print_banner("LGXPACK Build - Build And Package Modules")

        try:
            config = load_config(context, args)
            packager = LgxPackager(config.lgx, verbose=args.verbose)
            packager.check()
            modules = load_modules(config, args)

            builder = None
            build_variant = None
            if not args.no_build:
                try:
                    build_variant = args.variant or host_variant()
                except ValueError as e:
                    raise SetupError(str(e))
                builder = NixBuilder(config.build_command, config.library_subdir, verbose=args.verbose)

            print(config.get_config_summary())
            print(f"Build directory: {config.build_path}")
            if build_variant:
                print(f"Build variant: {build_variant}")

            _, results = runner.run(
                config, AssemblyMode.FRESH, modules, packager,
                builder=builder, build_variant=build_variant,
            )
        except LgxPackError as e:
            fail(e)

        print()
        print_banner("Build Summary")
        for result in results:
            print(f"  ✅ {result.package_filename}: {', '.join(result.variants)}")
        packaged = {result.module for result in results}
        for module in modules:
            if module not in packaged:
                print(f"  ⚠️  {module} (no library output)")

        print("\nAll modules built successfully.")
        print(f"LGX packages created in {config.output_path}")
        print(f"Package list written to {os.path.join(config.output_path, INDEX_FILE_NAME)}")
