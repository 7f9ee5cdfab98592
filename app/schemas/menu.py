"""
Pydantic schemas for the public menu
"""

from pydantic import BaseModel
from typing import Optional

class MenuItemResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    price: float
    category: str
    image_url: Optional[str]
    is_available: bool
    preparation_time: int

    class Config:
        from_attributes = True

class MenuResponse(BaseModel):
    menu_items: list[MenuItemResponse]
