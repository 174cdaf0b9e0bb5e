"""
Fakes and a base test case wiring the app to in-memory backends.
"""

import re
import unittest

from fastapi.testclient import TestClient

from blog_backend.app import create_app
from blog_backend.cache import InMemoryCache
from blog_backend.config import Settings, get_settings
from blog_backend.db import InMemoryDbClient
from blog_backend.dependencies import (
    get_ai_provider,
    get_cache,
    get_db_client,
    get_storage_client,
    get_token_verifier,
)
from blog_backend.storage import InMemoryStorageClient
from llm.provider import ProviderCallError

ADMIN_ID = 1
USER_ID = 2
OTHER_USER_ID = 3


class FakeTokenVerifier:
    """Accepts tokens of the form ``mock_token_<user id>``."""

    def verify(self, token):
        match = re.fullmatch(r"mock_token_(\d+)", token)
        return {"id": int(match.group(1))} if match else None


class FakeAiProvider:
    def __init__(self, reply="Hello there!", error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    def generate(self, request):
        self.requests.append(request)
        if self.error:
            raise ProviderCallError(self.error)
        return self.reply


def auth(user_id):
    return {"Authorization": f"Bearer mock_token_{user_id}"}


class ApiTestCase(unittest.TestCase):
    """Base case: app with in-memory backends, an admin (1) and two users (2, 3)."""

    def setUp(self):
        self.db = InMemoryDbClient()
        self.cache = InMemoryCache()
        self.storage = InMemoryStorageClient()
        self.ai = FakeAiProvider()
        self.settings = Settings(use_in_memory_backends=True, s3_folder="images/")

        self.app = create_app()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.app.dependency_overrides[get_cache] = lambda: self.cache
        self.app.dependency_overrides[get_storage_client] = lambda: self.storage
        self.app.dependency_overrides[get_token_verifier] = FakeTokenVerifier
        self.app.dependency_overrides[get_ai_provider] = lambda: self.ai
        self.app.dependency_overrides[get_settings] = lambda: self.settings

        self.db.create_user("admin", "gh_admin", permission=1, user_id=ADMIN_ID)
        self.db.create_user("regular", "gh_regular", permission=0, user_id=USER_ID)
        self.db.create_user("other", "gh_other", permission=0, user_id=OTHER_USER_ID)

        self.client = TestClient(self.app)
