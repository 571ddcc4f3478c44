"""
Seed the reference occasions
Inserts missing occasions and refreshes the style of existing ones
"""
# Standard library imports
import asyncio
import sys
from pathlib import Path

# Make the project root importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Local imports
from storage import async_session_factory, cleanup_db, init_db
from storage.repositories import OccasionRepository


FONT_SET = ["Playfair Display", "Dancing Script", "Montserrat", "Pacifico"]

DEFAULT_OCCASIONS = [
    {
        "id": "christmas",
        "name": "Christmas",
        "is_active": True,
        "style_guide": {
            "color_palette": ["#C8102E", "#006B3C", "#FFFFFF", "#FFD700"],
            "motifs": ["snowflakes", "trees", "ornaments", "lights"],
            "tone": "festive",
        },
        "font_set": FONT_SET,
    },
    {
        "id": "new-year",
        "name": "New Year",
        "is_active": True,
        "style_guide": {
            "color_palette": ["#FFD700", "#000000", "#FFFFFF", "#FF6B6B"],
            "motifs": ["fireworks", "clock", "champagne", "confetti", "countdown"],
            "tone": "celebratory",
        },
        "font_set": FONT_SET,
    },
    {
        "id": "hanukkah",
        "name": "Hanukkah",
        "is_active": True,
        "style_guide": {
            "color_palette": ["#0033A0", "#FFFFFF", "#FFD700", "#C8102E"],
            "motifs": ["menorah", "dreidel", "stars", "candles", "latkes"],
            "tone": "joyful",
        },
        "font_set": FONT_SET,
    },
    {
        "id": "kwanzaa",
        "name": "Kwanzaa",
        "is_active": True,
        "style_guide": {
            "color_palette": ["#000000", "#C8102E", "#006B3C", "#FFD700"],
            "motifs": ["kinara", "mkeka", "kente", "unity cup", "fruits"],
            "tone": "reflective",
        },
        "font_set": FONT_SET,
    },
    {
        "id": "winter-solstice",
        "name": "Winter Solstice",
        "is_active": True,
        "style_guide": {
            "color_palette": ["#1E3A5F", "#FFFFFF", "#FFD700", "#87CEEB"],
            "motifs": ["snow", "ice", "stars", "moon", "evergreen"],
            "tone": "peaceful",
        },
        "font_set": FONT_SET,
    },
]


async def init_occasions():
    """Upsert DEFAULT_OCCASIONS"""
    print("Seeding occasions...")

    async with async_session_factory() as session:
        try:
            occasion_repo = OccasionRepository(session)

            for occasion_data in DEFAULT_OCCASIONS:
                fields = {key: value for key, value in occasion_data.items() if key != "id"}
                occasion = await occasion_repo.upsert(occasion_data["id"], **fields)
                print(f"  ✓ {occasion.name} ({occasion.id})")

            await session.commit()
            print(f"\nDone, {len(DEFAULT_OCCASIONS)} occasions seeded.")
            return 0

        except Exception as e:
            await session.rollback()
            print(f"✗ Seeding failed: {str(e)}")
            import traceback
            traceback.print_exc()
            return 1


async def main():
    try:
        await init_db()
        return await init_occasions()
    finally:
        await cleanup_db()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
