"""
Tests for lgxpack configuration.

Run with: python3 -m pytest lgxpack/utils/test_config.py
"""

import os
import tempfile
import unittest
from argparse import Namespace
from unittest.mock import patch

from lgxpack.pipeline.errors import ConfigError
from lgxpack.pipeline.variants import ALL_VARIANTS
from lgxpack.utils.config import DEFAULT_BUILD_COMMAND, LgxPackConfig, expand_env, parse_list

CLEAN_ENV = {"LGX": "", "ARTIFACTS_DIR": "", "LGXPACK_BUILD_DIR": "", "LGXPACK_OUTPUT_DIR": ""}


class TestLgxPackConfig(unittest.TestCase):
    """Test configuration defaults and precedence."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.repo = self.temp_dir.name
        env = patch.dict(os.environ, CLEAN_ENV)
        env.start()
        self.addCleanup(env.stop)

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_toml(self, content, name="LGXPACK.toml"):
        path = os.path.join(self.repo, name)
        with open(path, "w") as f:
            f.write(content)
        return path

    def test_defaults(self):
        """Test defaults without a config file."""
        config = LgxPackConfig.load(self.repo)

        self.assertEqual(config.lgx, "")
        self.assertEqual(config.variants, ALL_VARIANTS)
        self.assertEqual(config.modules, [])
        self.assertEqual(config.build_command, DEFAULT_BUILD_COMMAND)
        self.assertEqual(config.library_subdir, "lib")
        self.assertEqual(config.artifacts_path, os.path.join(os.path.abspath(self.repo), "artifacts"))
        self.assertEqual(config.output_path, os.path.join(os.path.abspath(self.repo), "output"))

    def test_toml_file(self):
        """Test values are read from LGXPACK.toml."""
        self.write_toml(
            '[package]\n'
            'lgx = "/opt/lgx/bin/lgx"\n'
            'artifacts_dir = "/tmp/artifacts"\n'
            'variants = ["darwin-arm64", "linux-amd64"]\n'
            'modules = ["modules/wallet"]\n'
            '[build]\n'
            'command = ["make", "OUT={out}"]\n'
            'library_subdir = "dist"\n'
        )

        config = LgxPackConfig.load(self.repo)

        self.assertEqual(config.lgx, "/opt/lgx/bin/lgx")
        self.assertEqual(config.artifacts_path, "/tmp/artifacts")
        self.assertEqual(config.variants, ["darwin-arm64", "linux-amd64"])
        self.assertEqual(config.modules, ["modules/wallet"])
        self.assertEqual(config.build_command, ["make", "OUT={out}"])
        self.assertEqual(config.library_subdir, "dist")

    def test_env_expansion_and_override(self):
        """Test ${VAR} expansion in the file and environment overrides."""
        self.write_toml('[package]\nlgx = "${TOOLS}/lgx"\noutput_dir = "out"\n')

        with patch.dict(os.environ, {"TOOLS": "/tools", "LGXPACK_OUTPUT_DIR": "/srv/out"}):
            config = LgxPackConfig.load(self.repo)

        self.assertEqual(config.lgx, "/tools/lgx")
        self.assertEqual(config.output_path, "/srv/out")

    def test_args_override(self):
        """Test command line values win over file and environment."""
        self.write_toml('[package]\nartifacts_dir = "from-file"\n')

        with patch.dict(os.environ, {"ARTIFACTS_DIR": "from-env"}):
            config = LgxPackConfig.load(self.repo)
            self.assertTrue(config.artifacts_path.endswith("from-env"))
            config.apply_args(Namespace(artifacts_dir="from-args", variants="linux-arm64"))

        self.assertTrue(config.artifacts_path.endswith("from-args"))
        self.assertEqual(config.variants, ["linux-arm64"])

    def test_explicit_config_file(self):
        """Test --config loads another file and a missing one fails."""
        path = self.write_toml('[package]\nvariants = "linux-amd64, linux-arm64"\n', "ci.toml")

        config = LgxPackConfig.load(self.repo, path)
        self.assertEqual(config.variants, ["linux-amd64", "linux-arm64"])

        with self.assertRaises(ConfigError):
            LgxPackConfig.load(self.repo, os.path.join(self.repo, "missing.toml"))

    def test_invalid_toml(self):
        """Test a broken file is a ConfigError."""
        self.write_toml("[package\nlgx = ")
        with self.assertRaises(ConfigError):
            LgxPackConfig.load(self.repo)

    def test_unknown_variant(self):
        """Test variants outside the known families are rejected."""
        with self.assertRaises(ConfigError):
            LgxPackConfig({"package": {"variants": ["windows-amd64"]}}, self.repo)

    def test_duplicate_variant(self):
        """Test a variant may only be listed once."""
        with self.assertRaises(ConfigError):
            LgxPackConfig({"package": {"variants": ["linux-amd64", "linux-amd64"]}}, self.repo)

    def test_invalid_build_command(self):
        """Test the build command must be a list of strings."""
        with self.assertRaises(ConfigError):
            LgxPackConfig({"build": {"command": "nix build"}}, self.repo)


class TestHelpers(unittest.TestCase):
    """Test value helpers."""

    def test_expand_env(self):
        """Test both variable syntaxes and unknown variables."""
        with patch.dict(os.environ, {"A": "1"}):
            self.assertEqual(expand_env("${A}/$A/${NOPE_X}"), "1/1/${NOPE_X}")
        self.assertEqual(expand_env(3), 3)

    def test_parse_list(self):
        """Test arrays and comma-separated strings."""
        self.assertEqual(parse_list(None), [])
        self.assertEqual(parse_list("a, b,,c"), ["a", "b", "c"])
        self.assertEqual(parse_list(["a", " b "]), ["a", "b"])
        with self.assertRaises(ConfigError):
            parse_list(5)


if __name__ == '__main__':
    unittest.main()
