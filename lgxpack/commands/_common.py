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

"""Arguments and helpers shared by the packaging commands."""

import os
import sys
import argparse

from lgxpack.pipeline.errors import LgxPackError
from lgxpack.pipeline.modules import enumerate_modules
from lgxpack.utils.config import LgxPackConfig, parse_list
from lgxpack.utils.console import print_error


def add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--config",
        type=str,
        help="Path to LGXPACK.toml (default: ./LGXPACK.toml if present)",
    )
    parser.add_argument(
        "--variants",
        type=str,
        help="Comma-separated variants to look for, in order "
             "(default: linux-amd64,linux-arm64,darwin-arm64,darwin-amd64)",
    )
    parser.add_argument(
        "--modules",
        type=str,
        help="Comma-separated subset of modules to process (default: all)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print the output of external tools",
    )


def parse_command_args(parser: argparse.ArgumentParser, command_file: str):
    module_name = os.path.splitext(os.path.basename(command_file))[0]
    input_argv = [x for x in sys.argv[1:] if x != module_name]
    args, unknown = parser.parse_known_args(input_argv)
    return args


def load_config(context, args) -> LgxPackConfig:
    config = LgxPackConfig.load(context.repo_dir, args.config)
    config.apply_args(args)
    return config


def load_modules(config: LgxPackConfig, args):
    return enumerate_modules(config.repo_dir, config.modules, parse_list(args.modules))


def fail(error: LgxPackError):
    """Report a fatal error and exit with a non-zero status."""
    print_error(f"ERROR: {error}")
    sys.exit(1)
