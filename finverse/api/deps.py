from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
import jwt
from sqlalchemy.ext.asyncio import AsyncSession
from finverse.core.config import settings
from finverse.database import get_db
from finverse.services.game_store import GameStore
from finverse.services.month_advancer import MonthAdvancer

# Tokens are minted by Supabase Auth; the tokenUrl only documents the flow
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl="auth/v1/token",
    auto_error=False
)

async def get_current_user_id(
    request: Request,
    token: str = Depends(reusable_oauth2)
) -> str:
    # Try to get token from cookie if not in header
    if not token:
        token = request.cookies.get("access_token")
        if token and token.startswith("Bearer "):
            token = token.split(" ")[1]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options={"verify_aud": settings.JWT_AUDIENCE is not None},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )

    # Supabase stores the user id in 'sub'
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )
    return str(user_id)

async def get_game_store(db: AsyncSession = Depends(get_db)) -> GameStore:
    return GameStore(db)

def get_month_advancer() -> MonthAdvancer:
    return MonthAdvancer()
