"""Script to seed a demo user with plans and payment data."""

import asyncio
import logging

from sqlalchemy import delete, select

from components.core.init_db import get_db, init_db
from components.core.logging_config import setup_logging
from components.core.security import hash_password
from components.core.utils import utcnow
from components.payment.models import PaymentStatus, PaymentTotals
from components.plan.models import Plan
from components.user.repository import UserRepository

logger = logging.getLogger("scripts.seed_data")

DEMO_EMAIL = "test@example.com"
DEMO_PASSWORD = "password123"


async def seed_data():
    """Seed the demo account, replacing its previous plans."""
    await init_db()
    async for db in get_db():
        repo = UserRepository(db)
        user = await repo.get_by_email(DEMO_EMAIL)
        if user is None:
            user = await repo.create(DEMO_EMAIL, hash_password(DEMO_PASSWORD))
        else:
            plan_ids = select(Plan.id).where(Plan.user_id == user.id)
            await db.execute(delete(PaymentStatus).where(PaymentStatus.plan_id.in_(plan_ids)))
            await db.execute(delete(PaymentTotals).where(PaymentTotals.plan_id.in_(plan_ids)))
            await db.execute(delete(Plan).where(Plan.user_id == user.id))
            await db.commit()

        laptop = Plan(
            user_id=user.id,
            plan_name="Test Plan 1",
            total_amount=12000,
            number_of_months=12,
            monthly_payment=1000,
            debt_owner="self",
            is_active=True,
        )
        loan_to_friend = Plan(
            user_id=user.id,
            plan_name="Test Plan 2",
            total_amount=5000,
            number_of_months=5,
            monthly_payment=1000,
            debt_owner="other",
            is_active=False,
        )
        db.add_all([laptop, loan_to_friend])
        await db.flush()

        for month_index in range(12):
            paid = month_index < 3
            db.add(PaymentStatus(
                plan_id=laptop.id,
                month_index=month_index,
                status="paid" if paid else "pending",
                amount=1000,
                paid_at=utcnow() if paid else None,
            ))
        db.add(PaymentTotals(plan_id=laptop.id, total_paid=3000, remaining=9000))
        await db.commit()

        logger.info("Seeded %s with 2 plans (password: %s)", DEMO_EMAIL, DEMO_PASSWORD)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed_data())
