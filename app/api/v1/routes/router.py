# Main Router - app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1.routes.auth.auth import router as auth_router
from app.api.v1.routes.generations.generations import router as generations_router
from app.api.v1.routes.flashcards.flashcards import router as flashcards_router

router = APIRouter()

# Public/Auth routes
router.include_router(auth_router)

# Authenticated routes (each endpoint depends on get_current_user)
router.include_router(generations_router)
router.include_router(flashcards_router)
