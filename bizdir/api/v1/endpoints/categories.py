from fastapi import APIRouter, status
from sqlalchemy import select

from bizdir.core.dependencies import DBDependency
from bizdir.core.exceptions.errors import ConflictError, NotFoundError
from bizdir.core.responses import send_success
from bizdir.db.models.category import Category
from bizdir.db.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate

router = APIRouter(prefix="/categories", tags=["categories"])


async def get_category_or_404(db, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


async def ensure_name_available(db, name: str, exclude_id: int | None = None):
    query = select(Category).where(Category.name == name)
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    existing = await db.execute(query)
    if existing.scalar_one_or_none():
        raise ConflictError("Category name already exists")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(category_data: CategoryCreate, db: DBDependency):
    await ensure_name_available(db, category_data.name)
    category = Category(name=category_data.name)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return send_success(
        message="Category created",
        data=CategoryResponse.model_validate(category),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("")
async def list_categories(db: DBDependency):
    result = await db.execute(select(Category).order_by(Category.name))
    return send_success(
        data=[CategoryResponse.model_validate(c) for c in result.scalars().all()]
    )


@router.get("/{category_id}")
async def get_category(category_id: int, db: DBDependency):
    category = await get_category_or_404(db, category_id)
    return send_success(data=CategoryResponse.model_validate(category))


@router.put("/{category_id}")
async def update_category(category_id: int, category_data: CategoryUpdate, db: DBDependency):
    category = await get_category_or_404(db, category_id)
    await ensure_name_available(db, category_data.name, exclude_id=category_id)
    category.name = category_data.name
    await db.commit()
    await db.refresh(category)
    return send_success(
        message="Category updated", data=CategoryResponse.model_validate(category)
    )


@router.delete("/{category_id}")
async def delete_category(category_id: int, db: DBDependency):
    category = await get_category_or_404(db, category_id)
    deleted = CategoryResponse.model_validate(category)
    await db.delete(category)
    await db.commit()
    return send_success(message="Category deleted", data=deleted)
