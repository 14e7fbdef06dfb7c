from typing import Optional

from pydantic import BaseModel


class CategoryCreate(BaseModel):
    name: str
    parent_id: Optional[int] = None
    status: Optional[str] = "active"


class CategoryUpdate(CategoryCreate):
    pass


class CategoryMoveRequest(BaseModel):
    active_id: int
    over_id: Optional[int] = None
