"""Database seed script: creates the admin account from ADMIN_* settings.

Run: python -m scripts.seed

Re-running is safe: an existing admin keeps its password, but its role is
reset to admin and the account re-enabled.
"""

import asyncio
import sys


async def seed() -> int:
    """Create or repair the admin user. Returns a process exit code."""
    from db.database import AsyncSessionLocal, close_db, init_db
    from app.config import get_settings
    from core.constants import Role
    from services.auth_service import AuthService

    settings = get_settings()
    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        print("[seed] ADMIN_USERNAME and ADMIN_PASSWORD must be set", file=sys.stderr)
        return 2

    # Initialize DB tables
    await init_db()

    try:
        async with AsyncSessionLocal() as db:
            auth_svc = AuthService(db)
            user = await auth_svc.get_user_by_username(settings.ADMIN_USERNAME)

            if not user:
                user = await auth_svc.register(
                    username=settings.ADMIN_USERNAME,
                    password=settings.ADMIN_PASSWORD,
                    email=settings.ADMIN_EMAIL or None,
                    role=Role.ADMIN.value,
                )
                print(f"[seed] Created admin user: {user.username} ({user.id})")
            else:
                if user.role != Role.ADMIN.value or not user.is_active:
                    print(f"[seed] Repairing {user.username}: role {user.role!r} -> 'admin', active")
                    user.role = Role.ADMIN.value
                    user.is_active = True
                else:
                    print(f"[seed] Admin user exists: {user.username}")

            await db.commit()
    finally:
        await close_db()

    print("[seed] Done")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(seed()))
