#!/usr/bin/env python3
"""
Seed a local database with demo accounts.

Accounts normally come from the auth service; this creates one admin, one
civilian and two volunteers (one accepted) so the API can be exercised
with X-User-Id / X-User-Role headers.
"""

import asyncio

from dotenv import load_dotenv

# Settings are read at import time, so load .env first
load_dotenv()

from sqlalchemy import select  # noqa: E402

from crisisconnect.database import async_session_maker, init_db  # noqa: E402
from crisisconnect.models import User, VolunteerProfile  # noqa: E402
from crisisconnect.models.enums import ApplicationStatus, Role  # noqa: E402

DEMO_USERS = [
    ("Asha Admin", "admin@crisisconnect.local", "+15550000001", Role.ADMIN),
    ("Carlos Civilian", "civilian@crisisconnect.local", "+15550000002", Role.CIVILIAN),
    ("Vera Volunteer", "vera@crisisconnect.local", "+15550000003", Role.VOLUNTEER),
    ("Victor Volunteer", "victor@crisisconnect.local", "+15550000004", Role.VOLUNTEER),
]

DEMO_SKILLS = {
    "vera@crisisconnect.local": (["First Aid", "Driving"], ApplicationStatus.ACCEPTED),
    "victor@crisisconnect.local": (["Cooking"], ApplicationStatus.PENDING),
}


def log(msg):
    """Print with flush for immediate output."""
    print(msg, flush=True)


async def seed() -> None:
    await init_db()

    async with async_session_maker() as db:
        for name, email, phone, role in DEMO_USERS:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            if user is None:
                user = User(name=name, email=email, phone=phone, role=role)
                db.add(user)
                await db.flush()
                log(f"Created {role} {name}: {user.id}")
            else:
                log(f"Exists  {role} {name}: {user.id}")

            if email in DEMO_SKILLS:
                skills, application_status = DEMO_SKILLS[email]
                result = await db.execute(
                    select(VolunteerProfile).where(VolunteerProfile.user_id == user.id)
                )
                profile = result.scalar_one_or_none()
                if profile is None:
                    profile = VolunteerProfile(
                        user_id=user.id, skills=skills, application_status=application_status
                    )
                    db.add(profile)
                    await db.flush()
                    log(f"  volunteer profile {profile.id}")

        await db.commit()


if __name__ == "__main__":
    asyncio.run(seed())
