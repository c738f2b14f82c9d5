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

import argparse

from lgxpack.commands._common import (
    add_common_arguments,
    fail,
    load_config,
    load_modules,
    parse_command_args,
)
from lgxpack.pipeline.errors import LgxPackError
from lgxpack.pipeline import runner
from lgxpack.utils.console import print_banner, print_success
from lgxpack.utils.context.command import CliCommand
from lgxpack.utils.context.context import CliContext
from lgxpack.utils.context.namespace import CliNameSpace


class Verify(CliCommand):
    def description(self) -> str:
        return """Verify single-variant lgx packages without packaging them.

For every module, the manifests of all variants found in the artifacts
directory are compared, ignoring the platform specific "main" field.
The first mismatch is reported with both manifests and exits non-zero.

EXAMPLES:
    lgxpack verify --artifacts-dir artifacts
        """

    def cli(self) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="lgxpack verify",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--artifacts-dir",
            dest="artifacts_dir",
            type=str,
            help="Directory with <variant>/<module>/*.lgx (default: artifacts)",
        )
        add_common_arguments(parser)
        return parse_command_args(parser, __file__)

    def exec(self, context: CliContext, args: CliNameSpace):
        print_banner("LGXPACK Verify - Compare Variant Manifests")

        try:
            config = load_config(context, args)
            modules = load_modules(config, args)
            verified = runner.verify(config, modules)
        except LgxPackError as e:
            fail(e)

        print()
        total = sum(count for _, count in verified)
        print_success(f"{len(verified)} module(s), {total} manifest(s) verified")
