# connectlist/models/list_feed.py
from typing import List, Optional
from pydantic import BaseModel, Field

from connectlist.models.profile import AuthorSummary


class ListItemView(BaseModel):
    id: Optional[str] = None
    externalId: Optional[str] = None
    title: str = ""
    imageUrl: Optional[str] = None
    type: Optional[str] = None
    year: Optional[str] = None
    description: Optional[str] = None
    position: Optional[int] = None


class ListFeedItem(BaseModel):
    id: Optional[str] = None
    type: str                  # origen: feed, user_list, liked_list, category_list, detail
    title: str = ""
    description: str
    category: str
    likes: int = 0
    comments: int = 0
    timestamp: str = ""
    previewItems: List[ListItemView] = Field(default_factory=list)
    itemsCount: int = 0
    moreCount: int = 0         # "+N more" cuando hay más de 3 items
    isPublic: bool = True
    createdAt: Optional[str] = None
    author: Optional[AuthorSummary] = None


class CommentView(BaseModel):
    id: Optional[str] = None
    text: str = ""
    timestamp: str = ""
    createdAt: Optional[str] = None
    user: Optional[AuthorSummary] = None


class ListDetail(ListFeedItem):
    """Pantalla de detalle: la tarjeta del feed más todos los items y comentarios."""
    items: List[ListItemView] = Field(default_factory=list)
    commentList: List[CommentView] = Field(default_factory=list)
    isLiked: bool = False
    isOwner: bool = False
