# fintrack/schemas/category.py
import uuid
from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from fintrack.models.category import CategoryType
from .common import OptionalText, blank_to_none

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category_type: CategoryType
    icon: Optional[str] = None
    color: Optional[str] = None

class CategoryUpdate(BaseModel):
    name: OptionalText = Field(None, max_length=100)
    category_type: Annotated[Optional[CategoryType], BeforeValidator(blank_to_none)] = None
    icon: Optional[str] = None
    color: Optional[str] = None

class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category_type: CategoryType
    icon: Optional[str] = None
    color: Optional[str] = None
    # True for the shared system categories
    is_default: bool = False
