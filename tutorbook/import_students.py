"""One-off import of the student spreadsheet.

Usage: python -m tutorbook.import_students Student.xlsx
"""
import argparse
import asyncio
import logging

from tutorbook.config import settings
from tutorbook.db import db_shutdown, db_startup
from tutorbook.services.repository import BeanieRepository
from tutorbook.services.student_import import read_student_sheet

logger = logging.getLogger(__name__)


async def import_students(path: str) -> int:
    rows = read_student_sheet(path)
    print(f"Found {len(rows)} students to import...")

    await db_startup()
    repo = BeanieRepository()
    imported = 0
    try:
        for fields in rows:
            if not fields["preferred_time"]:
                fields["preferred_time"] = settings.default_preferred_time
            try:
                s = await repo.create_or_update_student(fields)
            except Exception as e:
                logger.error("Error importing %s: %s", fields["name"], e)
                continue
            imported += 1
            print(f"Imported {s.name} with ID: {s.id}")
    finally:
        await db_shutdown()
    print(f"Import complete! {imported}/{len(rows)} students imported.")
    return imported


def main() -> None:
    parser = argparse.ArgumentParser(description="Import students from an Excel sheet")
    parser.add_argument("path", nargs="?", default="Student.xlsx")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(import_students(args.path))


if __name__ == "__main__":
    main()
