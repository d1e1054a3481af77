from fastapi import APIRouter

from app.api import admin, auth, catalog, leaderboard, leagues, roster

router = APIRouter()
router.include_router(auth.router)
router.include_router(catalog.router)
router.include_router(leagues.router)
router.include_router(roster.router)
router.include_router(leaderboard.router)
router.include_router(admin.router)
