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
Package index (list.json) generation.

Entries are keyed by module identifier. The written index is a JSON array
sorted by that key, so the order modules were built in never shows.
"""

import json
import os
import sys
from typing import Any, Dict, Iterable, List, Optional

INDEX_FILE_NAME = "list.json"

# (manifest key, index key), copied when present and not null or empty
COPIED_FIELDS = (
    ("type", "type"),
    ("name", "moduleName"),
    ("description", "description"),
    ("dependencies", "dependencies"),
    ("category", "category"),
    ("author", "author"),
)


def make_entry(module: str, manifest: Dict[str, Any], package_filename: str,
               variants: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Build one sparse index entry."""
    item = {"name": module, "package": package_filename}

    for manifest_key, index_key in COPIED_FIELDS:
        value = manifest.get(manifest_key)
        if value is None or (isinstance(value, (str, list, dict)) and not value):
            continue
        item[index_key] = value

    if manifest.get("version"):
        item["version"] = manifest["version"]

    variants = list(variants or [])
    if variants:
        item["variants"] = variants

    return item


class IndexBuilder:
    """Accumulate index entries and write them as a sorted list.json."""

    def __init__(self):
        self._entries: Dict[str, Dict[str, Any]] = {}

    def __len__(self):
        return len(self._entries)

    def __contains__(self, module):
        return module in self._entries

    def add(self, module: str, manifest: Dict[str, Any], package_filename: str,
            variants: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Add or replace the entry of a module."""
        item = make_entry(module, manifest, package_filename, variants)
        self._entries[module] = item
        return item

    def add_result(self, result) -> Dict[str, Any]:
        """Add an AssemblyResult."""
        return self.add(result.module, result.manifest, result.package_filename, result.available)

    def merge_existing(self, path: str) -> int:
        """
        Merge entries of a previously written index.

        Entries already added in this run win over the ones on disk, so a
        re-run over a subset of modules keeps the unrelated entries.

        Returns:
            Number of entries taken from the file
        """
        if not os.path.isfile(path):
            return 0

        try:
            with open(path, "r", encoding="utf-8") as f:
                existing = json.load(f)
        except (OSError, ValueError) as e:
            print(f"   ⚠️  Warning: ignoring unreadable index {path}: {e}", file=sys.stderr)
            return 0

        if not isinstance(existing, list):
            print(f"   ⚠️  Warning: ignoring index {path}, expected a JSON array", file=sys.stderr)
            return 0

        merged = 0
        for item in existing:
            if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                continue
            if item["name"] in self._entries:
                continue
            self._entries[item["name"]] = item
            merged += 1
        return merged

    def entries(self) -> List[Dict[str, Any]]:
        return [self._entries[k] for k in sorted(self._entries)]

    def to_json(self) -> str:
        return json.dumps(self.entries(), indent=2)

    def write(self, path: str) -> str:
        """Write the sorted index to path, creating parent directories."""
        parent = os.path.dirname(os.path.abspath(path))
        os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json())
        return path
