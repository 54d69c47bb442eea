from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt

from app.config import Settings, get_settings


def verify_token(
    authorization: str = Header(None),
    settings: Settings = Depends(get_settings),
):
    if not authorization or not settings.jwt_secret:
        raise HTTPException(status_code=401, detail="Invalid or missing token")
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError(scheme)
        return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    except (ValueError, JWTError):
        raise HTTPException(status_code=401, detail="Invalid or missing token")
