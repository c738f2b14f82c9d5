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
Helpers for the parts of the lgx archive format this tool touches.

An lgx package is a gzip-compressed tar archive with manifest.json at its
root and the files of each variant stored under variants/<variant>/.
Creating packages and adding variants is left to the lgx binary.
"""

import io
import json
import os
import tarfile
import tempfile
from typing import Any, Dict, Iterable, Optional

from .errors import PackageFormatError

LGX_EXTENSION = ".lgx"
MANIFEST_NAME = "manifest.json"
VARIANTS_PREFIX = "variants"

# Keys copied from canonical metadata into a freshly created package.
# "main" is resolved per variant when the variant is added.
PATCHABLE_KEYS = ("name", "version", "description", "author", "type", "category", "dependencies")


def read_manifest(lgx_path: str) -> Optional[Dict[str, Any]]:
    """
    Read the embedded manifest.json of an lgx package.

    Returns:
        The decoded manifest, or None if the archive has no manifest.json
    """
    try:
        with tarfile.open(lgx_path, "r:gz") as tar:
            for member in tar.getmembers():
                if member.name == MANIFEST_NAME and member.isfile():
                    data = tar.extractfile(member).read()
                    manifest = json.loads(data)
                    if not isinstance(manifest, dict):
                        raise PackageFormatError(f"{MANIFEST_NAME} in {lgx_path} is not a JSON object")
                    return manifest
    except (OSError, tarfile.TarError, ValueError) as e:
        raise PackageFormatError(f"Failed to read {lgx_path}: {e}")
    return None


def extract_variant_files(lgx_path: str, variant: str, extract_dir: str) -> int:
    """
    Extract the regular files of one variant into extract_dir.

    Paths are made relative to variants/<variant>/. Members that would
    land outside extract_dir are ignored.

    Returns:
        Number of files written
    """
    prefix = f"{VARIANTS_PREFIX}/{variant}/"
    root = os.path.realpath(extract_dir)
    count = 0

    try:
        with tarfile.open(lgx_path, "r:gz") as tar:
            for member in tar.getmembers():
                if not member.isfile() or not member.name.startswith(prefix):
                    continue
                rel = member.name[len(prefix):]
                target = os.path.realpath(os.path.join(root, rel))
                if not rel or os.path.commonpath([root, target]) != root:
                    continue
                os.makedirs(os.path.dirname(target), exist_ok=True)
                with tar.extractfile(member) as src:
                    with open(target, "wb") as dst:
                        dst.write(src.read())
                # keep the executable bit of shared libraries
                os.chmod(target, member.mode & 0o777 or 0o644)
                count += 1
    except (OSError, tarfile.TarError) as e:
        raise PackageFormatError(f"Failed to extract {variant} from {lgx_path}: {e}")

    return count


def patch_manifest(lgx_path: str, metadata: Dict[str, Any],
                   keys: Iterable[str] = PATCHABLE_KEYS) -> Dict[str, Any]:
    """
    Overwrite manifest keys of an lgx package in place.

    Only truthy metadata values replace the package's value. Every other
    member is written back unchanged. The new archive is written next to
    the package and moved over it once complete.

    Returns:
        The patched manifest
    """
    try:
        with tarfile.open(lgx_path, "r:gz") as tar:
            members = []
            for member in tar.getmembers():
                if member.isfile():
                    members.append((member, tar.extractfile(member).read()))
                else:
                    members.append((member, None))
    except (OSError, tarfile.TarError) as e:
        raise PackageFormatError(f"Failed to read {lgx_path}: {e}")

    manifest = None
    patched = []
    for member, data in members:
        if member.name == MANIFEST_NAME and data is not None:
            try:
                manifest = json.loads(data)
            except ValueError as e:
                raise PackageFormatError(f"Invalid {MANIFEST_NAME} in {lgx_path}: {e}")
            if not isinstance(manifest, dict):
                raise PackageFormatError(f"{MANIFEST_NAME} in {lgx_path} is not a JSON object")
            for key in keys:
                if metadata.get(key):
                    manifest[key] = metadata[key]
            data = json.dumps(manifest, indent=2).encode()
            member.size = len(data)
        patched.append((member, data))

    if manifest is None:
        raise PackageFormatError(f"No {MANIFEST_NAME} found in {lgx_path}")

    fd, tmp_path = tempfile.mkstemp(
        prefix=".patch-", suffix=LGX_EXTENSION, dir=os.path.dirname(os.path.abspath(lgx_path))
    )
    try:
        with os.fdopen(fd, "wb") as raw:
            with tarfile.open(fileobj=raw, mode="w:gz", format=tarfile.GNU_FORMAT) as tar:
                for member, data in patched:
                    if data is not None:
                        tar.addfile(member, io.BytesIO(data))
                    else:
                        tar.addfile(member)
        os.replace(tmp_path, lgx_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise

    return manifest
