"""Service for catalog products."""
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from invoicedesk.models.product import Product
from invoicedesk.schemas.product import ProductCreate, ProductUpdate

REQUIRED_FIELDS = ("name", "price", "unit", "tax_rate")


class ProductService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product(self, product_id: uuid.UUID) -> Optional[Product]:
        result = await self.db.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    async def get_products(
        self,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Product], int]:
        """Get paginated products ordered by name."""
        filters = []
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(or_(
                Product.name.ilike(pattern),
                Product.description.ilike(pattern),
            ))

        count_stmt = select(func.count(Product.id))
        stmt = select(Product).order_by(Product.name)
        if filters:
            count_stmt = count_stmt.where(*filters)
            stmt = stmt.where(*filters)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        result = await self.db.execute(stmt.offset(skip).limit(limit))
        return list(result.scalars().all()), total

    async def create_product(self, data: ProductCreate) -> Product:
        product = Product(**data.model_dump())
        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def update_product(self, product_id: uuid.UUID, data: ProductUpdate) -> Optional[Product]:
        product = await self.get_product(product_id)
        if not product:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key in REQUIRED_FIELDS:
                continue
            setattr(product, key, value)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def delete_product(self, product_id: uuid.UUID) -> bool:
        product = await self.get_product(product_id)
        if not product:
            return False
        await self.db.delete(product)
        await self.db.commit()
        return True
