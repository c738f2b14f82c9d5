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
Module metadata reader.

Reads the metadata.json file at a module's root. Reading never fails: a
missing or malformed file yields the all-defaults record and the caller
decides whether an empty name is fatal.
"""

import json
import os
import sys
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

METADATA_FILE_NAME = "metadata.json"

DEFAULT_VERSION = "0.0.1"

STRING_FIELDS = ("type", "name", "description", "category", "author", "version", "main")


@dataclass
class ModuleMetadata:
    """Declared metadata of one module."""
    type: str = ""
    name: str = ""
    description: str = ""
    dependencies: List[str] = field(default_factory=list)
    category: str = ""
    author: str = ""
    version: str = DEFAULT_VERSION
    main: str = ""  # library basename without extension, e.g. "libwallet"

    def to_manifest(self) -> Dict[str, Any]:
        return asdict(self)


def metadata_from_dict(data: Any) -> ModuleMetadata:
    """
    Normalize a decoded JSON value into a ModuleMetadata.

    Fields with an unexpected type keep their default.
    """
    metadata = ModuleMetadata()
    if not isinstance(data, dict):
        return metadata

    for key in STRING_FIELDS:
        value = data.get(key)
        if isinstance(value, str):
            setattr(metadata, key, value)

    dependencies = data.get("dependencies")
    if isinstance(dependencies, list) and all(isinstance(d, str) for d in dependencies):
        metadata.dependencies = list(dependencies)

    if not metadata.version:
        metadata.version = DEFAULT_VERSION
    return metadata


def read_module_metadata(path: str) -> ModuleMetadata:
    """
    Load metadata from a metadata.json path or a module directory.

    Args:
        path: Path to metadata.json, or to the module directory holding it

    Returns:
        ModuleMetadata, all defaults if the file is missing or invalid
    """
    if os.path.isdir(path):
        path = os.path.join(path, METADATA_FILE_NAME)

    if not os.path.isfile(path):
        return ModuleMetadata()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"   ⚠️  Warning: failed to read {path}: {e}", file=sys.stderr)
        return ModuleMetadata()

    if not isinstance(data, dict):
        print(f"   ⚠️  Warning: {path} is not a JSON object, using defaults", file=sys.stderr)
    return metadata_from_dict(data)
