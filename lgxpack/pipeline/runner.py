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
Per-module packaging loop.

Modules are processed one at a time in enumeration order:
collect variants -> reconcile manifests -> assemble package -> index.
Any fatal error stops the run; list.json is only written once every
module went through, merged with the index already on disk.
"""

import os
from typing import List, Optional, Tuple

from .assembler import AssemblyMode, AssemblyResult, PackageAssembler
from .errors import ConfigError
from .index import INDEX_FILE_NAME, IndexBuilder
from .reconciler import verify_manifests
from .variants import VariantArtifact, collect_library_variants, collect_package_variants
from lgxpack.utils.console import print_step, print_success


def collect_variants(config, module: str, mode: str) -> List[VariantArtifact]:
    if mode == AssemblyMode.MERGE:
        return collect_package_variants(config.artifacts_path, module, config.variants)
    return collect_library_variants(config.build_path, module, config.variants)


def reconcile(artifacts: List[VariantArtifact]) -> int:
    entries = [(a.path, a.manifest) for a in artifacts if a.manifest is not None]
    verified = verify_manifests(entries)
    if verified:
        print(f"   Manifests verified: all {verified} variant(s) match (ignoring main field).")
    return verified


def process_module(config, assembler: PackageAssembler, module: str) -> Optional[AssemblyResult]:
    """
    Package one module.

    Returns:
        The assembly result, or None if the module has no artifacts
    """
    artifacts = collect_variants(config, module, assembler.mode)
    if not artifacts:
        print(f"   No artifacts found for {module}, skipping.")
        return None

    print(f"   Available variants for {module}: {' '.join(a.variant for a in artifacts)}")
    reconcile(artifacts)
    return assembler.assemble(module, artifacts, module_dir=config.resolve(module))


def run(config, mode: str, modules: List[str], packager,
        builder=None, build_variant: Optional[str] = None) -> Tuple[IndexBuilder, List[AssemblyResult]]:
    """
    Package every module and write <output>/list.json.

    Args:
        config: LgxPackConfig
        mode: AssemblyMode.MERGE or AssemblyMode.FRESH
        modules: Module identifiers in processing order
        packager: Packager used by the assembler
        builder: Optional builder run before each module (fresh mode)
        build_variant: Variant the builder produces

    Returns:
        (index, results) for the modules packaged in this run
    """
    if builder is not None:
        if mode != AssemblyMode.FRESH:
            raise ConfigError("A builder can only be used with fresh build output")
        if build_variant not in config.variants:
            raise ConfigError(f"Build variant {build_variant} is not in the variant list")

    output_dir = config.output_path
    os.makedirs(output_dir, exist_ok=True)
    assembler = PackageAssembler(packager, output_dir, mode)

    index = IndexBuilder()
    results = []
    for module in modules:
        print_step(f"Processing {module}")

        if builder is not None:
            print(f"   Building {module} for {build_variant}...")
            dest_dir = os.path.join(config.build_path, build_variant, module)
            builder.build(module, config.resolve(module), dest_dir)
            print_success(f"Built {module}")

        result = process_module(config, assembler, module)
        if result is None:
            continue

        index.add_result(result)
        results.append(result)
        print_success(f"Created {result.package_filename} ({', '.join(result.variants) or 'no variants'})")

    index_path = os.path.join(output_dir, INDEX_FILE_NAME)
    index.merge_existing(index_path)
    index.write(index_path)
    return index, results


def verify(config, modules: List[str]) -> List[Tuple[str, int]]:
    """
    Collect and reconcile single-variant packages without packaging.

    Returns:
        (module, verified manifest count) for modules with artifacts
    """
    verified = []
    for module in modules:
        print_step(f"Verifying {module}")
        artifacts = collect_package_variants(config.artifacts_path, module, config.variants)
        if not artifacts:
            print(f"   No lgx artifacts found for {module}, skipping.")
            continue
        print(f"   Available variants for {module}: {' '.join(a.variant for a in artifacts)}")
        verified.append((module, reconcile(artifacts)))
    return verified
