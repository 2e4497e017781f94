"""
Seed the default subscription plans (Starter, Super, Advanced).

Skips entirely when any subscription already exists.
Usage: python -m shikshan.db.seed_subscriptions
"""
import asyncio
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.core.enums import BillingCycle, PlanType
from shikshan.core.models import Subscription
from shikshan.core.schemas import SubscriptionFeatures
from shikshan.db.session import create_engine, create_session_factory

ALL_FEATURES = {name: True for name in SubscriptionFeatures.model_fields}

DEFAULT_PLANS: List[Dict[str, Any]] = [
    {
        "name": "Starter",
        "description": "Perfect for small schools getting started with digital management",
        "plan_type": PlanType.BASIC,
        "price": Decimal("999.00"),
        "max_students": 100,
        "max_teachers": 10,
        "max_classes": 20,
        "features": SubscriptionFeatures(),
        "is_popular": False,
        "sort_order": 1,
    },
    {
        "name": "Super",
        "description": "Ideal for growing schools with advanced features and integrations",
        "plan_type": PlanType.STANDARD,
        "price": Decimal("1999.00"),
        "max_students": 500,
        "max_teachers": 50,
        "max_classes": 100,
        "features": SubscriptionFeatures(
            sms_notifications=True,
            mobile_app=True,
            advanced_reports=True,
            bulk_import=True,
            online_exams=True,
            fee_management=True,
        ),
        "is_popular": True,
        "sort_order": 2,
    },
    {
        "name": "Advanced",
        "description": "Complete solution for large institutions with unlimited features",
        "plan_type": PlanType.PREMIUM,
        "price": Decimal("3999.00"),
        "max_students": 2000,
        "max_teachers": 200,
        "max_classes": 500,
        "features": SubscriptionFeatures(**ALL_FEATURES),
        "is_popular": False,
        "sort_order": 3,
    },
]


async def seed_subscriptions(db: AsyncSession) -> int:
    """Insert the default plans. Returns the number of plans created."""
    existing = (await db.execute(select(func.count()).select_from(Subscription))).scalar_one()
    if existing:
        print("Subscriptions already exist, skipping seeding.")
        return 0

    for plan in DEFAULT_PLANS:
        db.add(
            Subscription(
                name=plan["name"],
                description=plan["description"],
                plan_type=plan["plan_type"].value,
                price=plan["price"],
                currency="INR",
                billing_cycle=BillingCycle.MONTHLY.value,
                trial_days=30,
                max_students=plan["max_students"],
                max_teachers=plan["max_teachers"],
                max_classes=plan["max_classes"],
                features=plan["features"].model_dump(mode="json"),
                is_active=True,
                is_popular=plan["is_popular"],
                sort_order=plan["sort_order"],
            )
        )
    await db.commit()
    print(f"Seeded {len(DEFAULT_PLANS)} default subscriptions.")
    return len(DEFAULT_PLANS)


async def main() -> None:
    engine = create_engine()
    try:
        async with create_session_factory(engine)() as db:
            try:
                await seed_subscriptions(db)
            except Exception as e:
                await db.rollback()
                print("Error:", e)
                raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
