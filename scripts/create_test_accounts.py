"""Create test accounts for test-mode deployment.

Run after database migration to create one admin, two verified doctors
and three patients.
"""

import asyncio
import secrets

from sqlalchemy import select

from app.core.security import hash_password
from app.db.session import AsyncSessionLocal
from app.models.user import User, UserRole

# Test account definitions
TEST_ACCOUNTS = [
    {
        "email": "admin@test.carebridge.local",
        "first_name": "Test",
        "last_name": "Admin",
        "role": UserRole.ADMIN,
    },
    {
        "email": "doctor1@test.carebridge.local",
        "first_name": "Dr Test",
        "last_name": "General",
        "role": UserRole.DOCTOR,
        "specialization": "General Practice",
        "license_number": "TEST-GP-0001",
        "years_of_experience": 12,
        "consultation_fee": 50.0,
    },
    {
        "email": "doctor2@test.carebridge.local",
        "first_name": "Dr Test",
        "last_name": "Cardiology",
        "role": UserRole.DOCTOR,
        "specialization": "Cardiology",
        "license_number": "TEST-CARD-0002",
        "years_of_experience": 8,
        "consultation_fee": 80.0,
    },
    {
        "email": "patient1@test.carebridge.local",
        "first_name": "Test",
        "last_name": "Patient One",
        "role": UserRole.PATIENT,
        "phone": "+1 555 0100 001",
    },
    {
        "email": "patient2@test.carebridge.local",
        "first_name": "Test",
        "last_name": "Patient Two",
        "role": UserRole.PATIENT,
        "phone": "+1 555 0100 002",
    },
    {
        "email": "patient3@test.carebridge.local",
        "first_name": "Test",
        "last_name": "Patient Three",
        "role": UserRole.PATIENT,
        "phone": "+1 555 0100 003",
    },
]


def generate_temp_password() -> str:
    """Generate a temporary password for test accounts."""
    return f"Test{secrets.token_urlsafe(8)}!"


async def create_accounts_db() -> tuple[list[dict], list[str]]:
    """Create test accounts in database."""
    created = []
    skipped = []

    async with AsyncSessionLocal() as session:
        for account in TEST_ACCOUNTS:
            existing = await session.scalar(select(User).where(User.email == account["email"]))
            if existing:
                skipped.append(account["email"])
                continue

            fields = {k: v for k, v in account.items() if k != "role"}
            role = account["role"]
            temp_password = generate_temp_password()
            user = User(
                **fields,
                role=role.value,
                hashed_password=hash_password(temp_password),
                is_active=True,
                is_verified=role == UserRole.DOCTOR,
            )
            session.add(user)
            created.append({
                "email": account["email"],
                "password": temp_password,
                "role": role.value,
            })

        await session.commit()

    return created, skipped


def print_accounts(created: list, skipped: list) -> None:
    """Print created accounts summary."""
    print("=" * 70)
    print("TEST ACCOUNTS CREATED")
    print("=" * 70)
    print()

    if created:
        print("NEW ACCOUNTS:")
        print("-" * 70)
        print(f"{'Email':<40} {'Role':<10} {'Password':<20}")
        print("-" * 70)
        for acc in created:
            print(f"{acc['email']:<40} {acc['role']:<10} {acc['password']:<20}")
        print()
        print("Save these passwords - they are temporary and shown only once.")
        print()

    if skipped:
        print("SKIPPED (already exist):")
        for email in skipped:
            print(f"  - {email}")
        print()

    print("Test account emails use the @test.carebridge.local domain.")
    print("Test doctors are pre-verified so they appear in booking lists.")


async def main() -> None:
    created, skipped = await create_accounts_db()
    print_accounts(created, skipped)


if __name__ == "__main__":
    asyncio.run(main())
