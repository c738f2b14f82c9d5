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
In-process stand-in for the lgx binary, used by the tests.

Packages are real gzip tarballs with manifest.json at the root and
variant files under variants/<variant>/, so the archive helpers run
against the same layout the real tool writes.
"""

import io
import json
import os
import tarfile
from typing import Dict, Optional

from .errors import PackagerError
from .lgx_archive import LGX_EXTENSION, MANIFEST_NAME, VARIANTS_PREFIX


def write_lgx(path: str, manifest: Optional[dict], files: Optional[Dict[str, bytes]] = None,
              directories=()):
    """Write an lgx tarball; manifest None leaves manifest.json out."""
    with tarfile.open(path, "w:gz", format=tarfile.GNU_FORMAT) as tar:
        for name in directories:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        if manifest is not None:
            data = json.dumps(manifest, indent=2).encode()
            info = tarfile.TarInfo(MANIFEST_NAME)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        for name, data in sorted((files or {}).items()):
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))


def single_variant_lgx(path: str, variant: str, manifest: dict, files: Dict[str, bytes]):
    """Write a single-variant package, files keyed by their path inside the variant"""
    members = {f"{VARIANTS_PREFIX}/{variant}/{rel}": data for rel, data in files.items()}
    write_lgx(path, manifest, members)


def read_members(path: str) -> Dict[str, bytes]:
    """Regular files of a tarball keyed by member name"""
    with tarfile.open(path, "r:gz") as tar:
        return {m.name: tar.extractfile(m).read() for m in tar.getmembers() if m.isfile()}


def read_member_names(path: str):
    with tarfile.open(path, "r:gz") as tar:
        return [m.name for m in tar.getmembers()]


class FakePackager:
    """Records create/add calls and writes packages like the lgx tool."""

    DEFAULT_MANIFEST = {
        "name": "",
        "version": "0.0.1",
        "description": "Default package description",
        "author": "",
        "type": "",
        "category": "",
        "dependencies": [],
        "main": {},
    }

    def __init__(self, fail_on_variant: Optional[str] = None):
        self.fail_on_variant = fail_on_variant
        self.created = []
        self.added = []

    def create(self, name: str, output_dir: str) -> str:
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, f"{name}{LGX_EXTENSION}")
        if os.path.exists(path):
            os.remove(path)
        manifest = dict(self.DEFAULT_MANIFEST, name=name)
        write_lgx(path, manifest, {"README": b"created by fake lgx\n"})
        self.created.append(path)
        return path

    def add(self, package_path: str, variant: str, files_dir: str, main: str):
        if variant == self.fail_on_variant:
            raise PackagerError(f"lgx add failed for variant {variant}")

        members = read_members(package_path)
        manifest = json.loads(members.pop(MANIFEST_NAME))
        manifest.setdefault("main", {})[variant] = main

        added_files = []
        for root, dirs, names in os.walk(files_dir):
            for name in names:
                full_path = os.path.join(root, name)
                rel = os.path.relpath(full_path, files_dir).replace(os.sep, "/")
                with open(full_path, "rb") as f:
                    members[f"{VARIANTS_PREFIX}/{variant}/{rel}"] = f.read()
                added_files.append(rel)

        write_lgx(package_path, manifest, members)
        self.added.append((os.path.basename(package_path), variant, main, sorted(added_files)))
