from pydantic import BaseModel
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union
from uuid import UUID

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    """Authorization context handed over by the auth collaborator.

    The engine only reads ``user_id`` (movement provenance) and ``terminal``;
    role and permissions are carried through untouched.
    """
    user_id: str
    name: Optional[str] = None
    role: Optional[str] = None
    permissions: Dict[str, Dict[str, bool]] = {}
    terminal: Optional[str] = None
    exp: Optional[int] = None


class CommonQueryParams(BaseModel):
    search: Optional[str] = None
    skip: Optional[int] = 0
    limit: Optional[int] = 100


class Lookup(BaseModel):
    id: Union[str, UUID]  # accepts both UUID and str
    name: str

    class Config:
        from_attributes = True


class JsonOutResult(BaseModel, Generic[T]):
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
