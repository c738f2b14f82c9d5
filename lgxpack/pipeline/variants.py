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
Build variants and per-variant artifact discovery.

A variant is a platform/architecture pair such as "linux-amd64". For each
module at most one artifact per variant is collected, in the order of the
variant enumeration rather than the order they were found on disk.
"""

import os
import platform
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import PackageFormatError
from .lgx_archive import LGX_EXTENSION, read_manifest

ALL_VARIANTS = ["linux-amd64", "linux-arm64", "darwin-arm64", "darwin-amd64"]

LIBRARY_EXTENSIONS = {
    "linux": ".so",
    "darwin": ".dylib",
}

KIND_PACKAGE = "package"
KIND_LIBRARY = "library"


@dataclass
class VariantArtifact:
    """The single artifact found for one variant of a module."""
    variant: str
    path: str
    kind: str = KIND_PACKAGE
    manifest: Optional[Dict[str, Any]] = None


def variant_family(variant: str) -> str:
    return variant.split("-", 1)[0]


def library_extension(variant: str) -> str:
    """Native shared library extension of a variant (".so", ".dylib")"""
    family = variant_family(variant)
    if family not in LIBRARY_EXTENSIONS:
        raise ValueError(f"Unknown variant family '{family}' in '{variant}'")
    return LIBRARY_EXTENSIONS[family]


def is_known_variant(variant: str) -> bool:
    return variant_family(variant) in LIBRARY_EXTENSIONS and "-" in variant


def host_variant() -> str:
    """
    Variant identifier of the machine running this process.

    Raises:
        ValueError: If the host OS or architecture has no variant
    """
    system_str = platform.system().lower()
    machine = platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        arch = "amd64"
    elif machine in ("arm64", "aarch64"):
        arch = "arm64"
    else:
        raise ValueError(f"Unsupported host architecture: {machine}")
    if system_str not in LIBRARY_EXTENSIONS:
        raise ValueError(f"Unsupported host system: {system_str}")
    return f"{system_str}-{arch}"


def find_variant_package(search_dir: str) -> Optional[str]:
    """First .lgx file (by name) directly inside search_dir, or None"""
    if not os.path.isdir(search_dir):
        return None
    candidates = sorted(
        f for f in os.listdir(search_dir)
        if f.endswith(LGX_EXTENSION) and os.path.isfile(os.path.join(search_dir, f))
    )
    if not candidates:
        return None
    return os.path.join(search_dir, candidates[0])


def collect_package_variants(artifacts_dir: str, module: str,
                             variants: List[str] = None) -> List[VariantArtifact]:
    """
    Collect single-variant lgx packages of a module.

    Looks for <artifacts_dir>/<variant>/<module>/*.lgx and reads the
    manifest embedded in each package found.

    Returns:
        Artifacts in enumeration order; empty if the module has none

    Raises:
        PackageFormatError: If a found package has no manifest.json
    """
    artifacts = []
    for variant in variants or ALL_VARIANTS:
        lgx_file = find_variant_package(os.path.join(artifacts_dir, variant, module))
        if not lgx_file:
            continue
        manifest = read_manifest(lgx_file)
        if manifest is None:
            raise PackageFormatError(f"No manifest.json found in {lgx_file}")
        artifacts.append(VariantArtifact(variant, lgx_file, KIND_PACKAGE, manifest))
    return artifacts


def collect_library_variants(build_dir: str, module: str,
                             variants: List[str] = None) -> List[VariantArtifact]:
    """
    Collect pre-built library directories of a module.

    Looks for the directory <build_dir>/<variant>/<module>/.

    Returns:
        Artifacts in enumeration order; empty if the module has none
    """
    artifacts = []
    for variant in variants or ALL_VARIANTS:
        library_dir = os.path.join(build_dir, variant, module)
        if os.path.isdir(library_dir):
            artifacts.append(VariantArtifact(variant, library_dir, KIND_LIBRARY))
    return artifacts
