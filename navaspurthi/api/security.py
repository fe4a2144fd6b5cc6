from fastapi import Header, HTTPException, status

from navaspurthi.services.admin_service import verify_api_token
from navaspurthi.utils.exceptions import AuthenticationError


def require_admin(x_admin_token: str = Header(None, alias="X-Admin-Token")):
    try:
        verify_api_token(x_admin_token)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return True
