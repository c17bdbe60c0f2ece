"""Rutas de categorías de eventos"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Dict

from shared.database.session import get_db
from shared.auth.dependencies import get_current_user
from shared.utils.exceptions import ServiceError, to_http_exception
from services.event_management.models.event import CategoryResponse, CategoryCreate
from services.event_management.services.category_service import CategoryService


router = APIRouter()


@router.get("", response_model=List[CategoryResponse])
async def get_categories(db: AsyncSession = Depends(get_db)):
    """
    Listar categorías con la cantidad de eventos publicados

    Endpoint público
    """
    categories = await CategoryService.get_categories(db)

    return [
        CategoryResponse(
            id=str(category.id),
            name=category.name,
            description=category.description,
            color=category.color,
            icon=category.icon,
            event_count=event_count
        )
        for category, event_count in categories
    ]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Crear categoría

    Requiere rol ADMIN
    """
    try:
        category = await CategoryService.create_category(
            db=db,
            category_data=category_data.model_dump(),
            current_user=current_user
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return CategoryResponse(
        id=str(category.id),
        name=category.name,
        description=category.description,
        color=category.color,
        icon=category.icon,
        event_count=0
    )
