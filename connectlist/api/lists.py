# connectlist/api/lists.py
from typing import Any, Dict, List, Optional

from azure.core.exceptions import AzureError
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from connectlist.api.deps import get_reporter, get_ws_manager
from connectlist.core.rows import category_key
from connectlist.models.list_feed import ListDetail, ListFeedItem
from connectlist.security.jwt_utils import current_user
from connectlist.services import feed
from connectlist.services import lists as list_service
from connectlist.services.error_reporter import ErrorReporter
from connectlist.services.interactions import (
    ListNotFoundError,
    add_comment,
    like_list,
    share_list,
    unlike_list,
)
from connectlist.services.websocket_manager import WebSocketManager

router = APIRouter(prefix="/lists", tags=["lists"])


class CommentIn(BaseModel):
    text: str = Field(..., min_length=1)


class ShareIn(BaseModel):
    userIds: List[str] = Field(..., min_length=1)


class ListItemIn(BaseModel):
    externalId: Optional[str] = None
    title: str = Field(..., min_length=1)
    imageUrl: Optional[str] = None
    type: Optional[str] = None
    year: Optional[str] = None
    description: Optional[str] = None

    @field_validator("year", mode="before")
    @classmethod
    def year_as_text(cls, v):
        return str(v) if isinstance(v, int) else v

    def to_row(self) -> Dict[str, Any]:
        return {
            "external_id": self.externalId,
            "title": self.title,
            "image_url": self.imageUrl,
            "type": self.type,
            "year": self.year,
            "description": self.description,
        }


class ListCreateIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=list_service.MAX_TITLE_LENGTH)
    description: str = Field("", max_length=list_service.MAX_DESCRIPTION_LENGTH)
    category: str
    isPublic: bool = True
    items: List[ListItemIn] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("title must not be blank")
        return v

    @field_validator("category")
    @classmethod
    def known_category(cls, v):
        if category_key(v) is None:
            raise ValueError(f"unknown category: {v}")
        return v


class ItemsIn(BaseModel):
    items: List[ListItemIn] = Field(..., min_length=1)


def _server_error(reporter: ErrorReporter, e: Exception, action: str, table: str) -> HTTPException:
    reporter.capture_database_error(e, query=action, table=table)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Could not {action}: {e}",
    )


def _require_owner(current: dict, owner_id: str):
    if current["sub"] != owner_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.get("/feed", response_model=List[ListFeedItem])
async def home_feed(
    category: Optional[str] = None,
    offset: int = Query(0, ge=0),
    limit: int = Query(feed.FEED_PAGE_SIZE, ge=1, le=50),
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    return feed.get_home_feed(category, offset=offset, page_size=limit, reporter=reporter)


@router.get("/liked", response_model=List[ListFeedItem])
async def liked_lists(
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    return feed.get_liked_lists(current["sub"], reporter=reporter)


@router.get("/user/{owner_id}", response_model=List[ListFeedItem])
async def user_lists(
    owner_id: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    return feed.get_user_lists(owner_id, reporter=reporter)


@router.get("/user/{owner_id}/category/{category}", response_model=List[ListFeedItem])
async def category_lists(
    owner_id: str,
    category: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    return feed.get_category_lists(owner_id, category, reporter=reporter)


@router.post("/{owner_id}/{list_id}/like")
async def like(
    owner_id: str,
    list_id: str,
    current: dict = Depends(current_user),
    ws_manager: WebSocketManager = Depends(get_ws_manager),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        await like_list(owner_id, list_id, current["sub"], ws_manager=ws_manager)
    except ListNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    except AzureError as e:
        raise _server_error(reporter, e, "like list", "listlikes")
    return {"ok": True}


@router.delete("/{owner_id}/{list_id}/like")
async def unlike(
    owner_id: str,
    list_id: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        unlike_list(list_id, current["sub"])
    except AzureError as e:
        raise _server_error(reporter, e, "unlike list", "listlikes")
    return {"ok": True}


@router.post("/{owner_id}/{list_id}/comments", status_code=status.HTTP_201_CREATED)
async def comment(
    owner_id: str,
    list_id: str,
    body: CommentIn,
    current: dict = Depends(current_user),
    ws_manager: WebSocketManager = Depends(get_ws_manager),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        created = await add_comment(owner_id, list_id, current["sub"], body.text, ws_manager=ws_manager)
    except ListNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    except AzureError as e:
        raise _server_error(reporter, e, "add comment", "listcomments")
    return {"id": created["RowKey"], "text": created["text"], "createdAt": created["created_at"]}


@router.post("/{owner_id}/{list_id}/share")
async def share(
    owner_id: str,
    list_id: str,
    body: ShareIn,
    current: dict = Depends(current_user),
    ws_manager: WebSocketManager = Depends(get_ws_manager),
    reporter: ErrorReporter = Depends(get_reporter),
):
    _require_owner(current, owner_id)
    try:
        sent = await share_list(owner_id, list_id, body.userIds, ws_manager=ws_manager)
    except ListNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    except AzureError as e:
        raise _server_error(reporter, e, "share list", "notifications")
    return {"ok": True, "notified": len(sent)}


# =========================
# Crear y editar listas (solo el dueño)
# =========================

@router.post("", response_model=ListDetail, status_code=status.HTTP_201_CREATED)
async def create(
    body: ListCreateIn,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    owner_id = current["sub"]
    try:
        created = list_service.create_list(
            owner_id,
            body.title,
            body.category,
            description=body.description,
            is_public=body.isPublic,
            items=[item.to_row() for item in body.items],
        )
        return list_service.get_list_detail(owner_id, created["RowKey"], viewer_id=owner_id)
    except AzureError as e:
        raise _server_error(reporter, e, "create list", "lists")


@router.post("/{owner_id}/{list_id}/items")
async def add_items(
    owner_id: str,
    list_id: str,
    body: ItemsIn,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    _require_owner(current, owner_id)
    try:
        added, skipped = list_service.add_items_to_list(
            owner_id, list_id, [item.to_row() for item in body.items]
        )
    except ListNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    except AzureError as e:
        raise _server_error(reporter, e, "add items", "listitems")
    return {"ok": True, "added": len(added), "skipped": skipped, "ids": [a["RowKey"] for a in added]}


@router.delete("/{owner_id}/{list_id}/items/{item_id}")
async def remove_item(
    owner_id: str,
    list_id: str,
    item_id: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    _require_owner(current, owner_id)
    try:
        list_service.remove_item(owner_id, list_id, item_id)
    except ListNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    except list_service.ItemNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    except AzureError as e:
        raise _server_error(reporter, e, "remove item", "listitems")
    return {"ok": True}


# va al final: /{owner_id}/{list_id} también matchea /user/{owner_id}
@router.get("/{owner_id}/{list_id}", response_model=ListDetail)
async def list_detail(
    owner_id: str,
    list_id: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        detail = list_service.get_list_detail(owner_id, list_id, viewer_id=current["sub"])
    except AzureError as e:
        raise _server_error(reporter, e, "load list", "lists")
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    return detail
