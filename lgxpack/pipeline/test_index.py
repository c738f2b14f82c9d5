"""
Tests for list.json generation.

Run with: python3 -m pytest lgxpack/pipeline/test_index.py
"""

import json
import os
import tempfile
import unittest

from lgxpack.pipeline.assembler import AssemblyResult
from lgxpack.pipeline.index import IndexBuilder, make_entry

WALLET = {
    "name": "wallet",
    "version": "1.0.0",
    "description": "Wallet module",
    "type": "core",
    "category": "finance",
    "author": "Logos",
    "dependencies": ["storage"],
    "main": "libwallet",
}


class TestMakeEntry(unittest.TestCase):
    """Test single index entries."""

    def test_full_entry(self):
        """Test manifest fields are copied under their index names."""
        item = make_entry("modules/wallet", WALLET, "wallet.lgx", ["linux-amd64", "darwin-arm64"])

        self.assertEqual(item, {
            "name": "modules/wallet",
            "package": "wallet.lgx",
            "type": "core",
            "moduleName": "wallet",
            "description": "Wallet module",
            "dependencies": ["storage"],
            "category": "finance",
            "author": "Logos",
            "version": "1.0.0",
            "variants": ["linux-amd64", "darwin-arm64"],
        })
        self.assertNotIn("main", item)

    def test_sparse_entry(self):
        """Test absent, null and empty fields are omitted."""
        item = make_entry("chat", {"name": "chat", "description": "", "author": None, "version": ""},
                          "chat.lgx", [])

        self.assertEqual(item, {"name": "chat", "package": "chat.lgx", "moduleName": "chat"})

    def test_empty_dependencies_omitted(self):
        """Test an empty dependency list is left out like other empty fields."""
        item = make_entry("chat", {"name": "chat", "dependencies": []}, "chat.lgx")
        self.assertNotIn("dependencies", item)
        self.assertEqual(item, {"name": "chat", "package": "chat.lgx", "moduleName": "chat"})


class TestIndexBuilder(unittest.TestCase):
    """Test accumulation, merging and writing of the index."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "output", "list.json")

    def tearDown(self):
        self.temp_dir.cleanup()

    def read(self):
        with open(self.path) as f:
            return json.load(f)

    def test_sorted_by_module(self):
        """Test entries are written sorted regardless of insertion order."""
        index = IndexBuilder()
        index.add("zeta", {"name": "zeta"}, "zeta.lgx")
        index.add("alpha", {"name": "alpha"}, "alpha.lgx")
        index.add("mid", {"name": "mid"}, "mid.lgx")

        index.write(self.path)

        self.assertEqual([item["name"] for item in self.read()], ["alpha", "mid", "zeta"])

    def test_idempotent_output(self):
        """Test identical inputs produce byte-identical files."""
        outputs = []
        for order in (("b", "a"), ("a", "b")):
            index = IndexBuilder()
            for module in order:
                index.add(module, dict(WALLET, name=module), f"{module}.lgx", ["linux-amd64"])
            index.merge_existing(self.path)
            index.write(self.path)
            with open(self.path, "rb") as f:
                outputs.append(f.read())

        self.assertEqual(outputs[0], outputs[1])

    def test_merge_preserves_unrelated_entries(self):
        """Test a re-run over a subset keeps entries of other modules."""
        first = IndexBuilder()
        first.add("wallet", WALLET, "wallet.lgx", ["linux-amd64"])
        first.add("chat", {"name": "chat", "version": "0.1.0"}, "chat.lgx", ["linux-amd64"])
        first.write(self.path)

        second = IndexBuilder()
        second.add("wallet", dict(WALLET, version="1.1.0"), "wallet.lgx", ["linux-amd64", "darwin-arm64"])
        merged = second.merge_existing(self.path)
        second.write(self.path)

        self.assertEqual(merged, 1)
        items = {item["name"]: item for item in self.read()}
        self.assertEqual(set(items), {"chat", "wallet"})
        self.assertEqual(items["chat"]["version"], "0.1.0")
        self.assertEqual(items["wallet"]["version"], "1.1.0")
        self.assertEqual(items["wallet"]["variants"], ["linux-amd64", "darwin-arm64"])

    def test_merge_missing_or_malformed(self):
        """Test a missing or unreadable index is ignored."""
        index = IndexBuilder()
        self.assertEqual(index.merge_existing(self.path), 0)

        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            f.write("{broken")
        self.assertEqual(index.merge_existing(self.path), 0)

        with open(self.path, "w") as f:
            json.dump({"name": "not-a-list"}, f)
        self.assertEqual(index.merge_existing(self.path), 0)

        with open(self.path, "w") as f:
            json.dump([{"package": "nameless.lgx"}, "junk", {"name": "ok", "package": "ok.lgx"}], f)
        self.assertEqual(index.merge_existing(self.path), 1)
        self.assertIn("ok", index)

    def test_add_result(self):
        """Test an AssemblyResult is indexed with all of its available variants."""
        result = AssemblyResult("wallet", "/out/wallet.lgx", WALLET,
                                variants=["darwin-arm64"], skipped=["linux-amd64"],
                                available=["linux-amd64", "darwin-arm64"])
        index = IndexBuilder()

        item = index.add_result(result)

        self.assertEqual(item["package"], "wallet.lgx")
        self.assertEqual(item["variants"], ["linux-amd64", "darwin-arm64"])
        self.assertEqual(len(index), 1)

    def test_to_json_format(self):
        """Test the serialized index is an indented JSON array."""
        index = IndexBuilder()
        self.assertEqual(index.to_json(), "[]")
        index.add("chat", {"name": "chat"}, "chat.lgx")
        self.assertTrue(index.to_json().startswith("[\n  {\n"))


if __name__ == '__main__':
    unittest.main()
