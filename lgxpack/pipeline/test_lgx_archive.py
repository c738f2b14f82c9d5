"""
Tests for the lgx archive helpers.

Run with: python3 -m pytest lgxpack/pipeline/test_lgx_archive.py
"""

import io
import json
import os
import tarfile
import tempfile
import unittest

from lgxpack.pipeline.errors import PackageFormatError
from lgxpack.pipeline._fake_lgx import read_member_names, read_members, write_lgx
from lgxpack.pipeline.lgx_archive import extract_variant_files, patch_manifest, read_manifest


class ArchiveTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = self.temp_dir.name

    def tearDown(self):
        self.temp_dir.cleanup()

    def path(self, *parts):
        return os.path.join(self.root, *parts)


class TestReadManifest(ArchiveTestCase):
    """Test reading embedded manifests."""

    def test_read_manifest(self):
        """Test the manifest.json member is decoded."""
        write_lgx(self.path("a.lgx"), {"name": "wallet", "main": "libwallet.so"})
        self.assertEqual(read_manifest(self.path("a.lgx"))["name"], "wallet")

    def test_missing_manifest(self):
        """Test an archive without manifest.json yields None."""
        write_lgx(self.path("a.lgx"), None, {"variants/linux-amd64/libx.so": b"x"})
        self.assertIsNone(read_manifest(self.path("a.lgx")))

    def test_not_an_archive(self):
        """Test a corrupt file raises PackageFormatError."""
        with open(self.path("bad.lgx"), "wb") as f:
            f.write(b"definitely not gzip")
        with self.assertRaises(PackageFormatError):
            read_manifest(self.path("bad.lgx"))


class TestPatchManifest(ArchiveTestCase):
    """Test in-place manifest rewriting."""

    def setUp(self):
        super().setUp()
        self.lgx = self.path("wallet.lgx")
        write_lgx(
            self.lgx,
            {"name": "", "version": "0.0.1", "description": "Existing description", "main": {}},
            {"variants/linux-amd64/libwallet.so": b"\x7fELF", "README": b"readme"},
            directories=["variants", "variants/linux-amd64"],
        )

    def test_truthy_values_overwrite(self):
        """Test non-empty metadata replaces package values."""
        manifest = patch_manifest(self.lgx, {"name": "wallet", "version": "1.0.0"})

        self.assertEqual(manifest["name"], "wallet")
        self.assertEqual(read_manifest(self.lgx)["version"], "1.0.0")

    def test_empty_values_leave_existing(self):
        """Test an empty description keeps the package's description."""
        patch_manifest(self.lgx, {"name": "wallet", "description": "", "dependencies": []})

        manifest = read_manifest(self.lgx)
        self.assertEqual(manifest["description"], "Existing description")
        self.assertNotIn("dependencies", manifest)

    def test_main_is_never_patched(self):
        """Test the per-variant main field is left to variant adds."""
        patch_manifest(self.lgx, {"name": "wallet", "main": "libwallet"})
        self.assertEqual(read_manifest(self.lgx)["main"], {})

    def test_other_members_preserved(self):
        """Test files and directories survive the rewrite unchanged."""
        before = read_member_names(self.lgx)

        patch_manifest(self.lgx, {"name": "wallet"})

        self.assertEqual(read_member_names(self.lgx), before)
        members = read_members(self.lgx)
        self.assertEqual(members["variants/linux-amd64/libwallet.so"], b"\x7fELF")
        self.assertEqual(members["README"], b"readme")
        self.assertEqual(os.listdir(self.root), ["wallet.lgx"])

    def test_missing_manifest_raises(self):
        """Test patching a package without manifest.json fails."""
        write_lgx(self.lgx, None, {"README": b"x"})
        with self.assertRaises(PackageFormatError):
            patch_manifest(self.lgx, {"name": "wallet"})

    def test_non_object_manifest_raises(self):
        """Test a manifest.json holding a JSON array is rejected."""
        write_lgx(self.lgx, ["not", "an", "object"], {"README": b"x"})
        with self.assertRaises(PackageFormatError):
            patch_manifest(self.lgx, {"name": "wallet"})


class TestExtractVariantFiles(ArchiveTestCase):
    """Test extracting one variant's files."""

    def test_only_requested_variant(self):
        """Test files of other variants and the manifest are not extracted."""
        lgx = self.path("wallet.lgx")
        write_lgx(lgx, {"name": "wallet"}, {
            "variants/linux-amd64/libwallet.so": b"linux",
            "variants/linux-amd64/plugins/extra.so": b"plugin",
            "variants/darwin-arm64/libwallet.dylib": b"darwin",
        })
        out = self.path("out")
        os.makedirs(out)

        count = extract_variant_files(lgx, "linux-amd64", out)

        self.assertEqual(count, 2)
        with open(os.path.join(out, "libwallet.so"), "rb") as f:
            self.assertEqual(f.read(), b"linux")
        self.assertTrue(os.path.isfile(os.path.join(out, "plugins", "extra.so")))
        self.assertFalse(os.path.exists(os.path.join(out, "libwallet.dylib")))
        self.assertFalse(os.path.exists(os.path.join(out, "manifest.json")))

    def test_path_traversal_ignored(self):
        """Test members escaping the target directory are skipped."""
        lgx = self.path("evil.lgx")
        with tarfile.open(lgx, "w:gz") as tar:
            for name, data in (("variants/linux-amd64/../../../escape.so", b"x"),
                               ("variants/linux-amd64/ok.so", b"ok")):
                info = tarfile.TarInfo(name)
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))
        out = self.path("nested", "out")
        os.makedirs(out)

        count = extract_variant_files(lgx, "linux-amd64", out)

        self.assertEqual(count, 1)
        self.assertFalse(os.path.exists(self.path("escape.so")))
        self.assertTrue(os.path.isfile(os.path.join(out, "ok.so")))


if __name__ == '__main__':
    unittest.main()
