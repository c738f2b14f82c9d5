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
import sys
import importlib
import argparse

from lgxpack.utils.context.namespace import CliNameSpace
from lgxpack.utils.context.context import CliContext
from lgxpack.utils.context.command import CliCommand

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """LGXPACK - Multi-Variant Module Packager

Assembles per-platform module builds into multi-variant lgx packages
and writes a list.json index of every packaged module.

USAGE:
    lgxpack <command> [options]

COMMANDS:
    package     Merge single-variant lgx packages downloaded from CI
    build       Build modules for this machine and package the library output
    verify      Check that per-variant manifests of every module agree

EXAMPLES:
    LGX=/path/to/lgx lgxpack package --artifacts-dir artifacts
    LGX=/path/to/lgx lgxpack build --modules modules/wallet
    lgxpack verify --artifacts-dir artifacts

For more information on a specific command:
    lgxpack <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if not command.startswith("_") and command.endswith(".py"):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def _root_parser(self, add_help: bool) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="lgxpack",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=add_help,
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            nargs='?',
            choices=self.get_command_list(),
        )
        return parser

    def cli(self) -> CliNameSpace:
        # lgxpack --help, but not lgxpack package --help
        if len(sys.argv) == 2 and sys.argv[1] in ['--help', '-h']:
            self._root_parser(add_help=True).print_help()
            sys.exit(0)

        # parse only known args - this will NOT consume --help if present
        args, unknown = self._root_parser(add_help=False).parse_known_args(namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if not args.subcommand:
            print("ERROR: No command specified\n", file=sys.stderr)
            self._root_parser(add_help=True).print_help()
            sys.exit(1)

        module = importlib.import_module(f"lgxpack.commands.{args.subcommand}")
        klass = getattr(module, args.subcommand.capitalize())
        sub_cmd = klass()
        sub_cmd.exec(context, sub_cmd.cli())


def main():
    cmd = Cli()
    cmd.exec(CliContext(), cmd.cli())


if __name__ == "__main__":
    main()
