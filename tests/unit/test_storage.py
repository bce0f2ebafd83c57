"""Unit tests for storage backend."""

import pytest

from dslgen.storage import LocalStorageBackend


@pytest.mark.asyncio
class TestLocalStorageBackend:
    """Tests for local filesystem storage."""

    async def test_store_text(self, temp_dir):
        """Generated sources land in package directories."""
        storage = LocalStorageBackend(temp_dir)

        content = "package dev.inkremental.dsl.android\n"
        key = "dev/inkremental/dsl/android/SdkSetter.kt"

        stored_key = await storage.store_text(key, content)

        assert stored_key == key
        assert (temp_dir / "dev" / "inkremental" / "dsl" / "android" / "SdkSetter.kt").read_bytes() == content.encode()

    async def test_overwrite(self, temp_dir):
        storage = LocalStorageBackend(temp_dir)
        await storage.store_text("a/B.kt", "first")
        await storage.store_text("a/B.kt", "second")
        assert (temp_dir / "a" / "B.kt").read_text(encoding="utf-8") == "second"

    async def test_newlines_are_not_translated(self, temp_dir):
        storage = LocalStorageBackend(temp_dir)
        await storage.store_text("a/C.kt", "one\ntwo\n")
        assert (temp_dir / "a" / "C.kt").read_bytes() == b"one\ntwo\n"

    @pytest.mark.parametrize("key", ["../escape.kt", "/etc/passwd", "a/../../b.kt", "C:/x.kt", ""])
    async def test_rejects_keys_outside_base(self, temp_dir, key):
        storage = LocalStorageBackend(temp_dir / "out")
        with pytest.raises(ValueError):
            await storage.store_text(key, "x")
        assert not (temp_dir / "escape.kt").exists()
