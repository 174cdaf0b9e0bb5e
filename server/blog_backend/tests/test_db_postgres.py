import unittest
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from blog_backend.db import PostgresDbClient
from blog_backend.errors import StorageError


class PostgresDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def setUp(self):
        self.db = PostgresDbClient("sqlite+pysqlite:///:memory:")

    def test_config_roundtrip(self):
        self.db.save_config("client", {"site.name": "Blog", "site.page_size": 5})
        self.assertEqual(
            self.db.load_config("client"), {"site.name": "Blog", "site.page_size": 5}
        )

    def test_save_config_overwrites_existing_keys(self):
        self.db.save_config("server", {"webhook_url": "https://a.test", "x": True})
        self.db.save_config("server", {"webhook_url": "https://b.test"})
        self.assertEqual(
            self.db.load_config("server"), {"webhook_url": "https://b.test", "x": True}
        )

    def test_namespaces_are_separate(self):
        self.db.save_config("client", {"key": "client"})
        self.db.save_config("server", {"key": "server"})
        self.assertEqual(self.db.load_config("client"), {"key": "client"})
        self.assertEqual(self.db.load_config("server"), {"key": "server"})

    def test_users(self):
        admin = self.db.create_user("admin", "gh_1", permission=1)
        user = self.db.create_user("user", "gh_2")
        self.assertTrue(self.db.get_user(admin.id).is_admin)
        self.assertFalse(self.db.get_user(user.id).is_admin)
        self.assertIsNone(self.db.get_user(999))

    def test_friend_lifecycle(self):
        pending = self.db.create_friend(
            name="Pending", desc="d", avatar="a", url="https://p.test", uid=2
        )
        accepted = self.db.create_friend(
            name="Accepted",
            desc="d",
            avatar="a",
            url="https://a.test",
            uid=3,
            accepted=True,
        )

        self.assertEqual([f.id for f in self.db.list_friends(accepted_only=True)], [accepted.id])
        self.assertEqual(len(self.db.list_friends()), 2)
        self.assertEqual([f.id for f in self.db.list_friends_by_owner(2)], [pending.id])

        updated = self.db.update_friend(
            pending.id, {"accepted": True, "sort_order": -1, "uid": 99}
        )
        self.assertTrue(updated.accepted)
        self.assertEqual(updated.uid, 2)
        self.assertEqual(self.db.list_friends(accepted_only=True)[0].id, pending.id)

        self.assertTrue(self.db.delete_friend(pending.id))
        self.assertFalse(self.db.delete_friend(pending.id))
        self.assertIsNone(self.db.get_friend(pending.id))
        self.assertIsNone(self.db.update_friend(pending.id, {"name": "x"}))

    def test_database_errors_become_storage_errors(self):
        self.db.Session = MagicMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("gone"))
        )
        with self.assertRaises(StorageError):
            self.db.load_config("client")

    def test_failed_batch_persists_nothing(self):
        with self.assertRaises(StorageError):
            self.db.save_config("client", {"a": 1, "b": object()})
        self.assertEqual(self.db.load_config("client"), {})


if __name__ == "__main__":
    unittest.main()
