"""Service for saved customers."""
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from invoicedesk.models.customer import Customer
from invoicedesk.schemas.customer import CustomerCreate, CustomerUpdate


class CustomerService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_customer(self, customer_id: uuid.UUID) -> Optional[Customer]:
        result = await self.db.execute(select(Customer).where(Customer.id == customer_id))
        return result.scalar_one_or_none()

    async def get_customers(
        self,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Customer], int]:
        """Get paginated customers ordered by name."""
        filters = []
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(or_(
                Customer.name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern),
            ))

        count_stmt = select(func.count(Customer.id))
        stmt = select(Customer).order_by(Customer.name)
        if filters:
            count_stmt = count_stmt.where(*filters)
            stmt = stmt.where(*filters)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        result = await self.db.execute(stmt.offset(skip).limit(limit))
        return list(result.scalars().all()), total

    async def create_customer(self, data: CustomerCreate) -> Customer:
        customer = Customer(**data.model_dump())
        self.db.add(customer)
        await self.db.commit()
        await self.db.refresh(customer)
        return customer

    async def update_customer(self, customer_id: uuid.UUID, data: CustomerUpdate) -> Optional[Customer]:
        customer = await self.get_customer(customer_id)
        if not customer:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key == "name":
                continue
            setattr(customer, key, value)
        await self.db.commit()
        await self.db.refresh(customer)
        return customer

    async def delete_customer(self, customer_id: uuid.UUID) -> bool:
        customer = await self.get_customer(customer_id)
        if not customer:
            return False
        await self.db.delete(customer)
        await self.db.commit()
        return True
