"""
Database Schemas

MongoDB collection documents for the cinema catalog, as Pydantic models.
Collections: "movies", "genres", "categories", "users".

Genres and categories are looked up by name and embedded whole inside a
movie, so a movie keeps its own copy of them.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Genre(BaseModel):
    """
    Genres collection schema
    Collection name: "genres"
    """
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Unique lookup key")


class Category(BaseModel):
    """
    Categories collection schema
    Collection name: "categories"
    """
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Unique lookup key")


class CastMember(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None


class Review(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: Optional[datetime] = Field(None, description="Parsed from the submitted date string")


class Movie(BaseModel):
    """
    Movies collection schema
    Collection name: "movies"
    """
    title: str
    genre: Dict[str, Any] = Field(..., description="Embedded genre document")
    duration: Optional[Any] = None
    releaseYear: Optional[Any] = None
    rating: Optional[float] = None
    cast: List[Dict[str, Any]] = Field(default_factory=list)
    reviews: List[Dict[str, Any]] = Field(default_factory=list)
    categories: List[Dict[str, Any]] = Field(default_factory=list, description="Embedded category documents")


class User(BaseModel):
    """
    Users collection schema
    Collection name: "users"
    """
    email: str = Field(..., description="Email address, unique")
    password: str = Field(..., description="BCrypt hash")
    role: Optional[str] = Field(None, description="'admin' or unset")
