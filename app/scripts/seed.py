"""Sample data seeder for local development.

Creates staff users (including managers), restaurants with their leads,
and a spread of follow-up tasks: some overdue, some due in about an hour,
some later, so that the escalation sweep has something to do.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import func, select, text

from app.core.config import settings
from app.core.constants import FOLLOW_UP_ESTIMATED_MINUTES
from app.models import Lead, Restaurant, Task, User
from app.schemas.common import LeadStatus, TaskPriority, TaskStatus, TaskType

LEAD_STATUSES = [s.value for s in LeadStatus]
PRIORITIES = [p.value for p in TaskPriority]
TOWNSHIPS = ["Bahan", "Kamayut", "Sanchaung", "Hlaing", "Yankin", "Tamwe"]
RESTAURANT_NAMES = [
    "Golden Bowl",
    "Shwe Myint Mo",
    "Rangoon Tea House",
    "Feel Myanmar Food",
    "Lucky Seven",
    "Nan Htike",
    "Aung Mingalar Shan Noodle",
    "999 Shan Noodle",
    "Danuphyu Daw Saw Yee",
    "Htet Eain Thu",
    "Yoe Yoe Lay",
    "Min Lan Seafood",
]


async def seed():
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_maker() as session:
        print("Seeding sample follow-up data")

        await session.execute(
            text(
                "TRUNCATE TABLE "
                "activity_logs, "
                "task_outcomes, "
                "follow_up_escalations, "
                "notifications, "
                "calendar_events, "
                "tasks, "
                "orders, "
                "leads, "
                "restaurants, "
                "users "
                "CASCADE"
            )
        )
        await session.commit()
        print("Cleared existing data")

        # 1. Users: two managers, one admin, five salespeople
        staff = [
            ("admin@dualline.example", "Daw Khin Admin", "admin"),
            ("manager1@dualline.example", "U Kyaw Manager", "manager"),
            ("manager2@dualline.example", "Daw Su Manager", "manager"),
        ] + [
            (f"sales{i}@dualline.example", f"Sales Rep {i}", "salesperson")
            for i in range(1, 6)
        ]
        users = []
        for email, name, role in staff:
            user = User(email=email, full_name=name, role=role)
            session.add(user)
            users.append(user)
        await session.flush()
        salespeople = [u for u in users if u.role == "salesperson"]
        admin = users[0]
        print(f"Created {len(users)} users")

        # 2. Restaurants + one lead each
        restaurants = []
        for i, name in enumerate(RESTAURANT_NAMES):
            rep = salespeople[i % len(salespeople)]
            restaurant = Restaurant(
                name=name,
                township=TOWNSHIPS[i % len(TOWNSHIPS)],
                phone=f"+9599{700000 + i:06d}",
                salesperson_id=rep.id,
            )
            session.add(restaurant)
            restaurants.append(restaurant)
        await session.flush()

        for i, restaurant in enumerate(restaurants):
            session.add(
                Lead(
                    restaurant_id=restaurant.id,
                    name=restaurant.name,
                    status=LEAD_STATUSES[i % 3],
                    assigned_to_user_id=restaurant.salesperson_id,
                )
            )
        await session.flush()
        print(f"Created {len(restaurants)} restaurants with leads")

        # 3. Follow-up tasks spread around "now"
        now = datetime.now(timezone.utc)
        offsets = [
            timedelta(hours=-26),
            timedelta(hours=-5),
            timedelta(minutes=-30),
            timedelta(minutes=58),
            timedelta(minutes=62),
            timedelta(hours=4),
            timedelta(days=1),
            timedelta(days=3),
        ]
        tasks = []
        for i in range(24):
            restaurant = restaurants[i % len(restaurants)]
            task = Task(
                title=f"Follow up with {restaurant.name}",
                description="Discuss gas supply and UCO pickup schedule",
                task_type=TaskType.lead_followup.value,
                status=TaskStatus.pending.value,
                priority=PRIORITIES[i % len(PRIORITIES)],
                due_date=now + offsets[i % len(offsets)],
                estimated_duration_minutes=FOLLOW_UP_ESTIMATED_MINUTES,
                assigned_to_user_id=restaurant.salesperson_id,
                created_by_user_id=admin.id,
                restaurant_id=restaurant.id,
            )
            session.add(task)
            tasks.append(task)
        await session.flush()
        print(f"Created {len(tasks)} follow-up tasks")

        await session.commit()

        overdue = (
            await session.execute(
                select(func.count(Task.id)).where(
                    Task.status == TaskStatus.pending.value, Task.due_date < now
                )
            )
        ).scalar()

        print("\nValidation:")
        print(f"  Users: {len(users)}")
        print(f"  Restaurants: {len(restaurants)}")
        print(f"  Tasks: {len(tasks)} ({overdue} overdue)")
        print("Seeding complete")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
