import jwt
import os
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, HTTPException
from typing import Annotated
from models.user import User

security = HTTPBearer()


def decode_user_token(token: str):
    jwt_key = os.getenv("JWT_SECRET")
    if not jwt_key:
        raise HTTPException(status_code=401, detail="Invalid Token")
    try:
        return jwt.decode(token, jwt_key, algorithms=['HS256'])
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid Token")


async def get_current_user(credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)]) -> User:
    user_credential = decode_user_token(token=credentials.credentials)
    if not user_credential or "id" not in user_credential:
        raise HTTPException(status_code=401, detail="Invalid Token")

    user = await User.get_or_none(id=user_credential["id"])
    if not user:
        raise HTTPException(status_code=401, detail="Invalid Credentials")
    return user
