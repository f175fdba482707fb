# connectlist/models/profile.py
from typing import Optional
from pydantic import BaseModel, Field


class ProfileStats(BaseModel):
    lists: int = 0
    likedLists: int = 0
    followers: int = 0
    following: int = 0


class ProfileView(BaseModel):
    id: Optional[str] = None
    fullName: str = "User"
    username: str = ""      # con '@' delante si existe
    bio: str = ""
    location: str = ""
    title: str = ""
    company: str = ""
    avatar: Optional[str] = None
    stats: ProfileStats = Field(default_factory=ProfileStats)


class AuthorSummary(BaseModel):
    id: Optional[str] = None
    username: str = ""
    fullName: str = ""
    avatar: Optional[str] = None
