"""
Public menu endpoint
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.models.menu_item import MenuItem
from app.schemas.menu import MenuResponse
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=MenuResponse)
@limiter.limit("60/minute")
async def get_menu(
    request: Request,
    category: Optional[str] = Query(None, description="Filter by category"),
    db: Session = Depends(get_db)
):
    """Available menu items, grouped by category order"""
    try:
        query = db.query(MenuItem).filter(MenuItem.is_available == True)
        if category:
            query = query.filter(MenuItem.category == category)
        items = query.order_by(MenuItem.category, MenuItem.name).all()
        return MenuResponse(menu_items=items)

    except Exception as e:
        logger.error(f"Failed to fetch menu items: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch menu items")
