import unittest

from blog_backend.db import FriendRecord
from blog_backend.errors import Forbidden, InvalidArgument, Unauthenticated
from blog_backend.masking import MASK, is_mask, mask_config, should_mask
from blog_backend.policy import (
    can_mutate_owned_resource,
    can_read_config,
    can_set_acceptance,
    can_write_config,
    require_admin,
    require_config_read,
    require_config_write,
    require_owner_or_admin,
)
from blog_backend.types import Identity, Namespace, parse_namespace

ADMIN = Identity(user_id=1, is_admin=True)
USER = Identity(user_id=2)
OTHER = Identity(user_id=3)


def friend_owned_by(uid):
    return FriendRecord(id=1, name="n", desc="d", avatar="a", url="u", uid=uid)


class PolicyTests(unittest.TestCase):
    def test_client_config_is_readable_by_anyone(self):
        for identity in (None, USER, ADMIN):
            self.assertTrue(can_read_config(Namespace.CLIENT, identity))

    def test_server_config_is_admin_only(self):
        self.assertFalse(can_read_config(Namespace.SERVER, None))
        self.assertFalse(can_read_config(Namespace.SERVER, USER))
        self.assertTrue(can_read_config(Namespace.SERVER, ADMIN))

    def test_writes_are_admin_only_in_both_namespaces(self):
        for namespace in Namespace:
            self.assertFalse(can_write_config(namespace, None))
            self.assertFalse(can_write_config(namespace, USER))
            self.assertTrue(can_write_config(namespace, ADMIN))

    def test_denials_distinguish_unauthenticated_from_forbidden(self):
        with self.assertRaises(Unauthenticated):
            require_config_read(Namespace.SERVER, None)
        with self.assertRaises(Forbidden):
            require_config_read(Namespace.SERVER, USER)
        with self.assertRaises(Unauthenticated):
            require_config_write(Namespace.CLIENT, None)
        with self.assertRaises(Forbidden):
            require_config_write(Namespace.CLIENT, USER)
        require_config_write(Namespace.SERVER, ADMIN)

    def test_require_admin(self):
        self.assertIs(require_admin(ADMIN), ADMIN)
        with self.assertRaises(Forbidden):
            require_admin(USER)
        with self.assertRaises(Unauthenticated):
            require_admin(None)

    def test_owned_resource_mutation(self):
        friend = friend_owned_by(USER.user_id)
        self.assertTrue(can_mutate_owned_resource(USER, friend))
        self.assertTrue(can_mutate_owned_resource(ADMIN, friend))
        self.assertFalse(can_mutate_owned_resource(OTHER, friend))
        self.assertFalse(can_mutate_owned_resource(None, friend))

        with self.assertRaises(Forbidden):
            require_owner_or_admin(OTHER, friend)
        with self.assertRaises(Unauthenticated):
            require_owner_or_admin(None, friend)

    def test_only_admin_sets_acceptance(self):
        self.assertTrue(can_set_acceptance(ADMIN))
        self.assertFalse(can_set_acceptance(USER))
        self.assertFalse(can_set_acceptance(None))

    def test_parse_namespace(self):
        self.assertIs(parse_namespace("server"), Namespace.SERVER)
        self.assertIs(parse_namespace("client"), Namespace.CLIENT)
        for value in ("", "invalid", "SERVER"):
            with self.assertRaises(InvalidArgument):
                parse_namespace(value)


class MaskingTests(unittest.TestCase):
    def test_sensitive_suffixes_in_server_namespace(self):
        for key in (
            "ai_summary.api_key",
            "oauth.secret",
            "s3.secret_key",
            "smtp.password",
            "bot.token",
        ):
            self.assertTrue(should_mask("server", key), key)

    def test_other_keys_are_not_masked(self):
        self.assertFalse(should_mask("server", "ai_summary.model"))
        self.assertFalse(should_mask("server", "api_key_hint"))
        self.assertFalse(should_mask("client", "map.api_key"))

    def test_mask_config_returns_copy(self):
        values = {"ai_summary.api_key": "sk-123", "webhook_url": "https://x.test"}
        masked = mask_config(Namespace.SERVER, values)

        self.assertEqual(masked["ai_summary.api_key"], MASK)
        self.assertEqual(masked["webhook_url"], "https://x.test")
        self.assertEqual(values["ai_summary.api_key"], "sk-123")

    def test_unset_secrets_pass_through(self):
        masked = mask_config("server", {"a.api_key": "", "b.token": None})
        self.assertEqual(masked, {"a.api_key": "", "b.token": None})

    def test_is_mask(self):
        self.assertTrue(is_mask(MASK))
        self.assertFalse(is_mask("sk-123"))
        self.assertFalse(is_mask(None))


if __name__ == "__main__":
    unittest.main()
