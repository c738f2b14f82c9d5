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
Multi-variant package assembly.

One assembler serves both pipelines:

- merge mode: inputs are single-variant lgx packages from CI runs. The
  canonical metadata is the first variant's embedded manifest and a
  variant whose main file is missing is skipped with a warning.
- fresh mode: inputs are library directories from a local build. The
  canonical metadata is the module's metadata.json and a missing main
  file is fatal.
"""

import os
import sys
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import EntryPointError, MissingNameError
from .lgx_archive import LGX_EXTENSION, extract_variant_files, patch_manifest
from .metadata import METADATA_FILE_NAME, read_module_metadata
from .variants import KIND_LIBRARY, LIBRARY_EXTENSIONS, VariantArtifact, library_extension


class AssemblyMode:
    MERGE = "merge"
    FRESH = "fresh"


@dataclass
class AssemblyResult:
    """Outcome of assembling one module's package."""
    module: str
    package_path: str
    manifest: Dict[str, Any]
    variants: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    # every collected variant, added or skipped, in enumeration order
    available: List[str] = field(default_factory=list)

    @property
    def package_filename(self) -> str:
        return os.path.basename(self.package_path)


def list_files(directory: str) -> List[str]:
    """All regular files below directory as sorted, '/'-separated relative paths"""
    files = []
    for root, dirs, names in os.walk(directory):
        for name in names:
            full_path = os.path.join(root, name)
            if os.path.isfile(full_path):
                files.append(os.path.relpath(full_path, directory).replace(os.sep, "/"))
    return sorted(files)


def resolve_entry_point(main: Optional[str], variant: str, files_dir: str) -> Optional[str]:
    """
    Entry point path of a variant, relative to its file set.

    A declared main gets the variant's library extension, replacing a
    library extension it may already carry. Without a main the first file
    of the file set is used.

    Returns:
        The entry point, or None if the file set is empty
    """
    if main:
        base, ext = os.path.splitext(main)
        if ext in LIBRARY_EXTENSIONS.values():
            main = base
        return main + library_extension(variant)

    files = list_files(files_dir)
    return files[0] if files else None


class PackageAssembler:
    """Create a fresh multi-variant package for one module."""

    def __init__(self, packager, output_dir: str, mode: str = AssemblyMode.MERGE):
        """
        Args:
            packager: Object with create(name, output_dir) and
                add(package_path, variant, files_dir, main), e.g. LgxPackager
            output_dir: Directory receiving <name>.lgx
            mode: AssemblyMode.MERGE or AssemblyMode.FRESH
        """
        if mode not in (AssemblyMode.MERGE, AssemblyMode.FRESH):
            raise ValueError(f"Unknown assembly mode: {mode}")
        self.packager = packager
        self.output_dir = output_dir
        self.mode = mode

    def canonical_metadata(self, module: str, artifacts: List[VariantArtifact],
                           module_dir: Optional[str] = None):
        """
        Resolve the canonical manifest and package name of a module.

        Returns:
            (manifest, package_name)

        Raises:
            MissingNameError: If fresh mode metadata declares no name
        """
        if self.mode == AssemblyMode.MERGE:
            first = artifacts[0]
            manifest = dict(first.manifest or {})
            name = manifest.get("name") or ""
            if not isinstance(name, str) or not name:
                # fall back to the single-variant package's own file name
                name = os.path.basename(first.path)
                if name.endswith(LGX_EXTENSION):
                    name = name[:-len(LGX_EXTENSION)]
            return manifest, name

        metadata_path = os.path.join(module_dir or module, METADATA_FILE_NAME)
        metadata = read_module_metadata(metadata_path)
        if not metadata.name:
            raise MissingNameError(module, metadata_path)
        return metadata.to_manifest(), metadata.name

    def _declared_main(self, artifact: VariantArtifact, manifest: Dict[str, Any]) -> str:
        main = ""
        if self.mode == AssemblyMode.MERGE and artifact.manifest:
            main = artifact.manifest.get("main") or ""
        if not main:
            main = manifest.get("main") or ""
        return main if isinstance(main, str) else ""

    def _add_from_dir(self, module: str, package_path: str, artifact: VariantArtifact,
                      files_dir: str, main: str) -> bool:
        if self.mode == AssemblyMode.MERGE and main and os.path.isfile(os.path.join(files_dir, main)):
            # the embedded main names a shipped file, e.g. a versioned soname
            entry_point = main
        else:
            entry_point = resolve_entry_point(main, artifact.variant, files_dir)
        if not entry_point or not os.path.isfile(os.path.join(files_dir, entry_point)):
            if self.mode == AssemblyMode.FRESH:
                raise EntryPointError(module, artifact.variant, entry_point or main)
            print(
                f"   ⚠️  main file '{entry_point or '<unset>'}' not found for variant "
                f"{artifact.variant} of {module}, skipping variant.",
                file=sys.stderr,
            )
            return False

        print(f"   Adding variant {artifact.variant} to {os.path.basename(package_path)} (main: {entry_point})")
        self.packager.add(package_path, artifact.variant, files_dir, entry_point)
        print(f"   ✓ Added variant {artifact.variant}")
        return True

    def add_variant(self, module: str, package_path: str, artifact: VariantArtifact,
                    manifest: Dict[str, Any]) -> bool:
        """
        Add one variant to the package.

        Returns:
            True if added, False if skipped for a missing main file (merge mode)
        """
        main = self._declared_main(artifact, manifest)

        if artifact.kind == KIND_LIBRARY:
            return self._add_from_dir(module, package_path, artifact, artifact.path, main)

        with tempfile.TemporaryDirectory(prefix=f"lgxpack-{artifact.variant}-") as extract_dir:
            extract_variant_files(artifact.path, artifact.variant, extract_dir)
            return self._add_from_dir(module, package_path, artifact, extract_dir, main)

    def assemble(self, module: str, artifacts: List[VariantArtifact],
                 module_dir: Optional[str] = None) -> AssemblyResult:
        """
        Build <output_dir>/<name>.lgx from the collected variant artifacts.

        Args:
            module: Module identifier
            artifacts: Collected artifacts in enumeration order, not empty
            module_dir: Module source directory holding metadata.json
                (fresh mode, defaults to the module identifier)

        Returns:
            AssemblyResult listing the added and skipped variants
        """
        if not artifacts:
            raise ValueError(f"No variants to assemble for {module}")

        manifest, package_name = self.canonical_metadata(module, artifacts, module_dir)

        package_path = self.packager.create(package_name, self.output_dir)
        print(f"   Updating package manifest of {os.path.basename(package_path)} with metadata...")
        patch_manifest(package_path, manifest)

        result = AssemblyResult(module, package_path, manifest,
                                available=[artifact.variant for artifact in artifacts])
        for artifact in artifacts:
            if self.add_variant(module, package_path, artifact, manifest):
                result.variants.append(artifact.variant)
            else:
                result.skipped.append(artifact.variant)

        if not result.variants:
            print(f"   ⚠️  No variant could be added to {result.package_filename}", file=sys.stderr)
        return result
