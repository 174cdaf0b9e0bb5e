import unittest
from unittest.mock import MagicMock

from blog_backend.cache import InMemoryCache
from blog_backend.config_store import SNAPSHOT_TTL, ConfigStore, snapshot_key
from blog_backend.db import InMemoryDbClient
from blog_backend.errors import StorageError
from blog_backend.types import Namespace


class FailingDbClient(InMemoryDbClient):
    def save_config(self, namespace, values):
        raise StorageError("Database operation save_config failed")


class ConfigStoreTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.cache = InMemoryCache()
        self.store = ConfigStore(self.db, Namespace.CLIENT, self.cache)

    def test_get_missing_key_returns_none(self):
        self.assertIsNone(self.store.get("site.name"))

    def test_get_or_default(self):
        self.assertEqual(self.store.get_or_default("site.page_size", 5), 5)
        self.db.save_config("client", {"site.page_size": 10})
        self.cache.clear()
        self.assertEqual(self.store.get_or_default("site.page_size", 5), 10)

    def test_set_is_buffered_until_save(self):
        self.store.set("site.name", "Blog")

        self.assertTrue(self.store.has_pending)
        self.assertEqual(self.store.get("site.name"), "Blog")
        self.assertEqual(self.db.load_config("client"), {})

        self.store.save()
        self.assertFalse(self.store.has_pending)
        self.assertEqual(self.db.load_config("client"), {"site.name": "Blog"})

    def test_all_merges_pending_over_stored(self):
        self.db.save_config("client", {"a": 1, "b": 2})
        self.store.set("b", 3)
        self.assertEqual(self.store.all(), {"a": 1, "b": 3})

    def test_auto_save_persists_immediately(self):
        self.store.set("comment.enabled", True, auto_save=True)
        self.assertEqual(self.db.load_config("client"), {"comment.enabled": True})
        self.assertFalse(self.store.has_pending)

    def test_save_without_changes_does_not_touch_db(self):
        db = MagicMock()
        store = ConfigStore(db, "client", self.cache)
        store.save()
        db.save_config.assert_not_called()

    def test_save_writes_one_batch(self):
        db = MagicMock()
        store = ConfigStore(db, "server", self.cache)
        store.set("a", 1)
        store.set("b", 2)
        store.save()
        db.save_config.assert_called_once_with("server", {"a": 1, "b": 2})

    def test_reads_are_served_from_snapshot(self):
        self.db.save_config("client", {"site.name": "Cached"})
        self.assertEqual(self.store.get("site.name"), "Cached")

        # Written behind the store's back: still the cached snapshot.
        self.db.save_config("client", {"site.name": "Changed"})
        self.assertEqual(self.store.get("site.name"), "Cached")
        self.assertEqual(self.cache.get(snapshot_key("client")), {"site.name": "Cached"})

    def test_save_invalidates_snapshot(self):
        self.store.all()
        self.assertIsNotNone(self.cache.get(snapshot_key(Namespace.CLIENT)))

        self.store.set("site.name", "New")
        self.store.save()
        self.assertIsNone(self.cache.get(snapshot_key(Namespace.CLIENT)))

        fresh = ConfigStore(self.db, Namespace.CLIENT, self.cache)
        self.assertEqual(fresh.get("site.name"), "New")

    def test_snapshot_uses_ttl(self):
        cache = MagicMock()
        cache.get_or_set.return_value = {}
        ConfigStore(self.db, "client", cache).all()
        self.assertEqual(cache.get_or_set.call_args.kwargs["ttl"], SNAPSHOT_TTL)

    def test_namespaces_are_isolated(self):
        server = ConfigStore(self.db, Namespace.SERVER, self.cache)
        server.set("webhook_url", "https://hooks.test/x")
        server.save()

        self.assertIsNone(self.store.get("webhook_url"))
        self.assertNotEqual(snapshot_key("client"), snapshot_key("server"))

    def test_failed_save_keeps_pending_changes(self):
        store = ConfigStore(FailingDbClient(), Namespace.CLIENT, self.cache)
        store.set("site.name", "Blog")

        with self.assertRaises(StorageError):
            store.save()
        self.assertTrue(store.has_pending)
        self.assertEqual(store.get("site.name"), "Blog")

        store.discard()
        self.assertFalse(store.has_pending)

    def test_rejects_unknown_namespace(self):
        with self.assertRaises(ValueError):
            ConfigStore(self.db, "other", self.cache)


if __name__ == "__main__":
    unittest.main()
