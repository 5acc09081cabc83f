"""
One-time backfill of ``logo_public_id`` for categories created before the
field existed.

Those records only carry the Cloudinary delivery URL of their logo, so the
service treats the logo as unmanaged and never deletes it. This command
derives the public id from each URL once, offline, and stores it; from
then on replacing or deleting the category removes the asset as usual.

Usage:
    catalog-backfill-logos --dry-run
    catalog-backfill-logos
"""
from typing import Optional
from urllib.parse import unquote, urlparse
import argparse
import asyncio
import logging
import re

from app.config.settings import Settings, get_settings
from app.core.logging_config import setup_logging
from app.repositories import BaseRepository, CategoryRepository

logger = logging.getLogger("catalog.backfill")

_VERSION = re.compile(r"^v\d+$")


def cloudinary_public_id(url: str, cloud_name: str = "") -> Optional[str]:
    """
    Public id of a Cloudinary image delivery URL, or None for any other URL.

    ``https://res.cloudinary.com/demo/image/upload/w_200/v1712/categories/logo.png``
    gives ``categories/logo``. Transformation segments before the version are
    skipped; without a version every segment is taken as part of the id.
    """
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc.endswith("cloudinary.com"):
        return None

    parts = [unquote(p) for p in parsed.path.split("/") if p]
    if len(parts) < 4 or parts[1] != "image" or parts[2] != "upload":
        return None
    if cloud_name and parts[0] != cloud_name:
        return None

    rest = parts[3:]
    versions = [i for i, part in enumerate(rest) if _VERSION.match(part)]
    if versions:
        rest = rest[versions[0] + 1:]
    if not rest:
        return None

    stem, dot, _ = rest[-1].rpartition(".")
    rest[-1] = stem if dot else rest[-1]
    return "/".join(rest) or None


async def backfill_logo_public_ids(
    category_repo: CategoryRepository,
    cloud_name: str = "",
    dry_run: bool = False
) -> dict:
    """
    Record the public id of every unmanaged Cloudinary logo.

    Returns counts of ``updated``, ``skipped`` (URL not on this Cloudinary
    account) and ``changed`` (logo replaced while the backfill ran).
    """
    counts = {"updated": 0, "skipped": 0, "changed": 0}

    for doc in await category_repo.find_unmanaged_logos():
        category_id = str(doc["_id"])
        public_id = cloudinary_public_id(doc["logo"], cloud_name)
        if public_id is None:
            logger.warning(
                f"Category {category_id}: logo {doc['logo']} is not a Cloudinary asset, skipped",
                extra={"category_id": category_id}
            )
            counts["skipped"] += 1
            continue

        if dry_run:
            logger.info(f"Category {category_id}: would set logo_public_id={public_id}",
                        extra={"category_id": category_id, "asset_id": public_id})
            counts["updated"] += 1
            continue

        if await category_repo.set_logo_public_id(doc["_id"], doc["logo"], public_id):
            logger.info(f"Category {category_id}: logo_public_id={public_id}",
                        extra={"category_id": category_id, "asset_id": public_id})
            counts["updated"] += 1
        else:
            counts["changed"] += 1

    return counts


async def run(settings: Settings, dry_run: bool = False) -> dict:
    base_repo = BaseRepository(settings)
    await base_repo.connect()
    try:
        category_repo = CategoryRepository(base_repo.db)
        category_repo.set_settings(settings)
        return await backfill_logo_public_ids(
            category_repo,
            cloud_name=settings.cloudinary_cloud_name,
            dry_run=dry_run
        )
    finally:
        await base_repo.disconnect()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Store the Cloudinary public id of category logos that predate logo_public_id."
    )
    parser.add_argument("--dry-run", action="store_true", help="Report what would change without writing.")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(log_level="INFO", log_dir=settings.log_dir, log_json=False)

    counts = asyncio.run(run(settings, dry_run=args.dry_run))
    logger.info(
        f"Backfill {'(dry run) ' if args.dry_run else ''}done: "
        f"{counts['updated']} updated, {counts['skipped']} skipped, {counts['changed']} changed meanwhile"
    )


if __name__ == "__main__":
    main()
