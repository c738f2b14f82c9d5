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

"""Multi-variant package assembly pipeline."""

from .assembler import AssemblyMode, AssemblyResult, PackageAssembler
from .errors import LgxPackError, ManifestMismatchError
from .index import IndexBuilder
from .metadata import ModuleMetadata, read_module_metadata
from .reconciler import verify_manifests
from .variants import ALL_VARIANTS, VariantArtifact

__all__ = [
    'AssemblyMode',
    'AssemblyResult',
    'PackageAssembler',
    'LgxPackError',
    'ManifestMismatchError',
    'IndexBuilder',
    'ModuleMetadata',
    'read_module_metadata',
    'verify_manifests',
    'ALL_VARIANTS',
    'VariantArtifact',
]
