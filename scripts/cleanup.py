"""
Delete expired cards once
Meant for cron; exits 1 when any card could not be deleted
"""
# Standard library imports
import asyncio
import logging
import sys
from pathlib import Path

# Make the project root importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Local imports
from config import settings
from storage import async_session_factory, cleanup_db
from routers.services.cleanup_service import CleanupService


async def run_cleanup():
    print("Starting cleanup job...\n")

    async with async_session_factory() as session:
        try:
            result = await CleanupService(session).sweep()
            await session.commit()
        except Exception as e:
            await session.rollback()
            print(f"\n✗ Cleanup job failed: {str(e)}")
            return 1

    print(f"\n✓ Cleanup completed in {result.duration_ms}ms")
    print(f"   - Total expired cards found: {result.total_expired}")
    print(f"   - Successfully deleted: {result.deleted}")
    print(f"   - Errors: {len(result.errors)}")

    if result.errors:
        print("\n✗ Errors encountered:")
        for error in result.errors:
            print(f"   - Card {error['card_id']}: {error['error']}")
        return 1

    return 0


async def main():
    try:
        return await run_cleanup()
    finally:
        await cleanup_db()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
