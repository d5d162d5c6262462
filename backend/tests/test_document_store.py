"""Tests for the document store adapter."""

from datetime import datetime, timezone

import pytest

from mallconsole.store.document_store import SERVER_TIMESTAMP, DocumentStore, DocumentStoreError


class TestDocumentStore:
    """Collection reads, writes and equality queries."""

    async def test_add_assigns_id_and_get_returns_fields(self, store: DocumentStore):
        doc_id = await store.collection("shops").add({"name": "Zara", "floor": "Ground"})

        doc = await store.collection("shops").get(doc_id)
        assert doc == {"id": doc_id, "name": "Zara", "floor": "Ground"}

    async def test_get_missing_returns_none(self, store: DocumentStore):
        assert await store.collection("shops").get("missing") is None

    async def test_get_all_keeps_storage_order(self, store: DocumentStore):
        for name in ("C", "A", "B"):
            await store.collection("shops").add({"name": name})

        docs = await store.collection("shops").get_all()
        assert [d["name"] for d in docs] == ["C", "A", "B"]

    async def test_collections_are_separate(self, store: DocumentStore):
        await store.collection("shops").add({"name": "Zara"})
        await store.collection("products").add({"name": "Jeans"})

        shops = await store.collection("shops").get_all()
        assert [d["name"] for d in shops] == ["Zara"]

    async def test_where_filters_strings_and_booleans(self, store: DocumentStore):
        offers = store.collection("offers")
        await offers.add({"title": "A", "shopId": "s1", "isActive": True})
        await offers.add({"title": "B", "shopId": "s1", "isActive": False})
        await offers.add({"title": "C", "shopId": "s2", "isActive": True})

        docs = await offers.where("shopId", "s1").where("isActive", True).get_all()
        assert [d["title"] for d in docs] == ["A"]

    async def test_server_timestamp_is_stamped(self, store: DocumentStore):
        before = datetime.now(timezone.utc)
        doc_id = await store.collection("shops").add({"name": "Zara", "createdAt": SERVER_TIMESTAMP})

        doc = await store.collection("shops").get(doc_id)
        stamped = datetime.fromisoformat(doc["createdAt"])
        assert stamped >= before

    async def test_update_merges_fields(self, store: DocumentStore):
        shops = store.collection("shops")
        doc_id = await shops.add({"name": "Zara", "floor": "Ground"})

        await shops.update(doc_id, {"floor": "First"})

        assert await shops.get(doc_id) == {"id": doc_id, "name": "Zara", "floor": "First"}

    async def test_update_missing_raises(self, store: DocumentStore):
        with pytest.raises(DocumentStoreError):
            await store.collection("shops").update("missing", {"name": "X"})

    async def test_set_creates_then_overwrites(self, store: DocumentStore):
        users = store.collection("users")
        await users.set("uid-1", {"role": "user", "email": "a@b.co"})
        await users.set("uid-1", {"role": "admin"})

        assert await users.get("uid-1") == {"id": "uid-1", "role": "admin"}

    async def test_delete_missing_is_noop(self, store: DocumentStore):
        shops = store.collection("shops")
        doc_id = await shops.add({"name": "Zara"})

        await shops.delete("missing")
        await shops.delete(doc_id)

        assert await shops.get_all() == []
