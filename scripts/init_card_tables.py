"""
Create the card tables
"""
# Standard library imports
import asyncio
import sys
from pathlib import Path

# Make the project root importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Local imports
from storage import init_db, cleanup_db


async def main():
    print("Creating card tables...")

    try:
        await init_db()
        print("✓ Tables created")

        print("\nTables:")
        print("  1. occasions - occasion reference data")
        print("  2. cards - holiday cards")

    except Exception as e:
        print(f"✗ Initialisation failed: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    finally:
        await cleanup_db()

    return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
