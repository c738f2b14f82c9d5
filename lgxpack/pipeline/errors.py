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
Exceptions raised by the packaging pipeline.

Every fatal condition is an LgxPackError. Commands catch the base class,
print the diagnostic and exit with a non-zero status.
"""

import json


class LgxPackError(Exception):
    """Base class for all packaging errors"""
    pass


class SetupError(LgxPackError):
    """Raised before any module is processed (no modules, missing tools)"""
    pass


class ConfigError(LgxPackError):
    """Raised for an unreadable or invalid LGXPACK.toml"""
    pass


class BuildError(LgxPackError):
    """Raised when the external builder fails for a module"""

    def __init__(self, module: str, message: str):
        super().__init__(f"Failed building {module}: {message}")
        self.module = module


class PackagerError(LgxPackError):
    """Raised when an lgx create/add invocation fails"""
    pass


class PackageFormatError(LgxPackError):
    """Raised when an lgx file is unreadable or lacks manifest.json"""
    pass


class MissingNameError(LgxPackError):
    """Raised when canonical metadata has no package name"""

    def __init__(self, module: str, source: str):
        super().__init__(f"No package name declared for {module} (read from {source})")
        self.module = module
        self.source = source


class EntryPointError(LgxPackError):
    """Raised when a variant's main file is not part of its file set"""

    def __init__(self, module: str, variant: str, entry_point: str):
        super().__init__(
            f"main file '{entry_point or '<unset>'}' not found for variant {variant} of {module}"
        )
        self.module = module
        self.variant = variant
        self.entry_point = entry_point


class ManifestMismatchError(LgxPackError):
    """
    Raised when two variant manifests of one module disagree.

    The compared projections exclude the platform specific "main" field.
    """

    def __init__(self, reference_path: str, conflicting_path: str,
                 reference: dict, conflicting: dict):
        self.reference_path = reference_path
        self.conflicting_path = conflicting_path
        self.reference = reference
        self.conflicting = conflicting
        super().__init__(
            f"manifest mismatch between {reference_path} and {conflicting_path}\n"
            f"  Reference: {json.dumps(reference, sort_keys=True)}\n"
            f"  Mismatch:  {json.dumps(conflicting, sort_keys=True)}"
        )
