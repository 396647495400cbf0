"""
peer_recognition/routes/__init__.py
Route registration
"""
from fastapi import APIRouter

from peer_recognition.errors import ERROR_RESPONSES
from peer_recognition.routes import chapters, participants, contributions, distributions, results

router = APIRouter()

for module in (chapters, participants, contributions, distributions, results):
    router.include_router(module.router, responses=ERROR_RESPONSES)
