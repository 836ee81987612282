from typing import Optional

from fastapi import Header, HTTPException


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Signed-in user id, set by the auth proxy in front of the app."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not signed in")
    return x_user_id.strip()
