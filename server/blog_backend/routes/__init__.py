"""
HTTP routes for the blog backend API.
"""

from fastapi import APIRouter

from blog_backend.routes import config, favicon, friends, storage

router = APIRouter()
router.include_router(config.router)
router.include_router(friends.router)
router.include_router(favicon.router)
router.include_router(storage.router)
