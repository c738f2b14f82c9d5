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
Cross-variant manifest reconciliation.

All variants of one module must declare the same manifest, apart from
"main" which names the platform specific library file.
"""

from typing import Any, Dict, List, Tuple

from .errors import ManifestMismatchError

PLATFORM_SPECIFIC_KEYS = ("main",)


def manifest_without_main(manifest: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in manifest.items() if k not in PLATFORM_SPECIFIC_KEYS}


def verify_manifests(entries: List[Tuple[str, Dict[str, Any]]]) -> int:
    """
    Check that every manifest matches the first one, ignoring "main".

    Comparison is structural: mapping order is irrelevant, list order is not.

    Args:
        entries: (path, manifest) pairs, reference first

    Returns:
        Number of manifests verified

    Raises:
        ManifestMismatchError: On the first manifest differing from the reference
    """
    if not entries:
        return 0

    reference_path, reference = entries[0]
    ref_comparable = manifest_without_main(reference)

    for path, manifest in entries[1:]:
        comparable = manifest_without_main(manifest)
        if comparable != ref_comparable:
            raise ManifestMismatchError(reference_path, path, ref_comparable, comparable)

    return len(entries)
