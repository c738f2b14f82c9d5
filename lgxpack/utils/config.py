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
Configuration handler for lgxpack.

Handles configuration from LGXPACK.toml and environment variables.
Precedence, highest first: command line flags, environment variables,
LGXPACK.toml, built-in defaults.
"""

import os
import re
import sys
from typing import Any, Dict, List, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from lgxpack.pipeline.errors import ConfigError
from lgxpack.pipeline.variants import ALL_VARIANTS, is_known_variant

CONFIG_FILE_NAME = "LGXPACK.toml"

DEFAULT_BUILD_COMMAND = [
    "nix", "build",
    "--extra-experimental-features", "nix-command flakes",
    "-o", "{out}",
    ".#lib",
]

# (attribute, environment variable)
ENV_OVERRIDES = (
    ("lgx", "LGX"),
    ("artifacts_dir", "ARTIFACTS_DIR"),
    ("build_dir", "LGXPACK_BUILD_DIR"),
    ("output_dir", "LGXPACK_OUTPUT_DIR"),
)


def expand_env(value):
    """
    Expand environment variables in configuration values.

    Supports ${VAR_NAME} and $VAR_NAME syntax. Unknown variables are kept.
    """
    if not isinstance(value, str):
        return value

    # Pattern for ${VAR_NAME}
    pattern1 = re.compile(r'\$\{([^}]+)\}')
    value = pattern1.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)

    # Pattern for $VAR_NAME
    pattern2 = re.compile(r'\$([A-Za-z_][A-Za-z0-9_]*)')
    value = pattern2.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)

    return value


def parse_list(value) -> List[str]:
    """Accept a TOML array or a comma-separated string"""
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, list):
        return [expand_env(str(v)).strip() for v in value if str(v).strip()]
    raise ConfigError(f"Expected a list or comma-separated string, got {value!r}")


def load_toml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to read {path}: {e}")


class LgxPackConfig:
    """Resolved settings of one lgxpack run."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, repo_dir: str = "."):
        """
        Initialize configuration.

        Args:
            config: Configuration dictionary from LGXPACK.toml
            repo_dir: Repository root, relative paths are resolved against it
        """
        self.raw_config = config or {}
        self.repo_dir = os.path.abspath(repo_dir)

        package_config = self.raw_config.get("package", {})
        build_config = self.raw_config.get("build", {})
        if not isinstance(package_config, dict) or not isinstance(build_config, dict):
            raise ConfigError("[package] and [build] must be tables")

        self.lgx = expand_env(package_config.get("lgx", ""))
        self.artifacts_dir = expand_env(package_config.get("artifacts_dir", "artifacts"))
        self.output_dir = expand_env(package_config.get("output_dir", "output"))
        self.build_dir = expand_env(package_config.get("build_dir", os.path.join("build", "libraries")))
        self.variants = parse_list(package_config.get("variants")) or list(ALL_VARIANTS)
        self.modules = parse_list(package_config.get("modules"))

        command = build_config.get("command", DEFAULT_BUILD_COMMAND)
        if not isinstance(command, list) or not all(isinstance(c, str) for c in command):
            raise ConfigError("[build].command must be an array of strings")
        self.build_command = [expand_env(c) for c in command]
        self.library_subdir = expand_env(build_config.get("library_subdir", "lib"))

        self.apply_env()
        self.validate()

    @classmethod
    def load(cls, repo_dir: str = ".", config_file: Optional[str] = None) -> "LgxPackConfig":
        """
        Load LGXPACK.toml from repo_dir, or an explicit file.

        A missing default file means defaults; a missing explicit file is an error.
        """
        if config_file:
            if not os.path.isfile(config_file):
                raise ConfigError(f"Config file not found: {config_file}")
            return cls(load_toml(config_file), repo_dir)

        default_file = os.path.join(repo_dir, CONFIG_FILE_NAME)
        if os.path.isfile(default_file):
            return cls(load_toml(default_file), repo_dir)
        return cls({}, repo_dir)

    def apply_env(self):
        for attr, env_var in ENV_OVERRIDES:
            value = os.environ.get(env_var)
            if value:
                setattr(self, attr, value)

    def apply_args(self, args):
        """Apply command line overrides (argparse namespace)."""
        for attr in ("lgx", "artifacts_dir", "output_dir", "build_dir"):
            value = getattr(args, attr, None)
            if value:
                setattr(self, attr, value)
        variants = getattr(args, "variants", None)
        if variants:
            self.variants = parse_list(variants)
        self.validate()

    def validate(self):
        if not self.variants:
            raise ConfigError("At least one variant is required")
        unknown = [v for v in self.variants if not is_known_variant(v)]
        if unknown:
            raise ConfigError(f"Unknown variants: {', '.join(unknown)}")
        if len(set(self.variants)) != len(self.variants):
            raise ConfigError("Duplicate variants in variant list")

    def resolve(self, path: str) -> str:
        if os.path.isabs(path):
            return path
        return os.path.join(self.repo_dir, path)

    @property
    def artifacts_path(self) -> str:
        return self.resolve(self.artifacts_dir)

    @property
    def output_path(self) -> str:
        return self.resolve(self.output_dir)

    @property
    def build_path(self) -> str:
        return self.resolve(self.build_dir)

    def get_config_summary(self) -> str:
        lines = [
            f"Repository: {self.repo_dir}",
            f"lgx: {self.lgx or '<unset>'}",
            f"Variants: {', '.join(self.variants)}",
            f"Output: {self.output_path}",
        ]
        return "\n".join(lines)
