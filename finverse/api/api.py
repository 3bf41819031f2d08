from fastapi import APIRouter
from . import game, chat, leaderboard

api_router = APIRouter()
api_router.include_router(game.router, prefix="/game", tags=["game"])
api_router.include_router(chat.router, prefix="/ai", tags=["ai"])
api_router.include_router(leaderboard.router, prefix="/leaderboard", tags=["leaderboard"])
