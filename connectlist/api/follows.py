# connectlist/api/follows.py
from azure.core.exceptions import AzureError
from fastapi import APIRouter, Depends, HTTPException, status

from connectlist.api.deps import get_reporter, get_ws_manager
from connectlist.security.jwt_utils import current_user
from connectlist.services.error_reporter import ErrorReporter
from connectlist.services.profiles import SelfFollowError, follow_user, is_following, unfollow_user
from connectlist.services.websocket_manager import WebSocketManager

router = APIRouter(prefix="/follows", tags=["follows"])


@router.post("/{user_id}")
async def follow(
    user_id: str,
    current: dict = Depends(current_user),
    ws_manager: WebSocketManager = Depends(get_ws_manager),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        created = await follow_user(current["sub"], user_id, ws_manager=ws_manager)
    except SelfFollowError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AzureError as e:
        reporter.capture_database_error(e, query=f"follow:{user_id}", table="follows")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not follow user: {e}",
        )
    return {"ok": True, "alreadyFollowing": not created}


@router.delete("/{user_id}")
async def unfollow(
    user_id: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        unfollow_user(current["sub"], user_id)
    except AzureError as e:
        reporter.capture_database_error(e, query=f"unfollow:{user_id}", table="follows")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not unfollow user: {e}",
        )
    return {"ok": True}


@router.get("/{user_id}/status")
async def follow_status(
    user_id: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        following = is_following(current["sub"], user_id)
    except AzureError as e:
        reporter.capture_database_error(e, query=f"follow_status:{user_id}", table="follows")
        following = False
    return {"following": following}
