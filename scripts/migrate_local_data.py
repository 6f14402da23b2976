"""Copy plans and payment data from a local JSON store into the configured storage."""

import asyncio
import logging
from argparse import ArgumentParser

from components.core.config import get_settings
from components.core.logging_config import setup_logging
from components.storage.factory import create_storage_service
from components.storage.interface import StorageService
from components.storage.keyvalue import JsonFileKeyValueArea
from components.storage.local import LocalStorageService

logger = logging.getLogger("scripts.migrate_local_data")


async def migrate(source: StorageService, target: StorageService) -> int:
    """
    Copy every plan of ``source`` into ``target`` keeping plan ids.

    Plans are written with one bulk upsert, so running the migration twice
    leaves a single copy. Returns the number of plans copied.
    """
    plans = await source.list_plans()
    if not plans:
        logger.info("Nothing to migrate")
        return 0

    await target.save_plans(plans)
    for plan in plans:
        entries = await source.get_payment_status(plan.id)
        if entries:
            await target.save_payment_status(plan.id, entries)
        totals = await source.get_payment_totals(plan.id)
        if totals is not None:
            await target.save_payment_totals(plan.id, totals)

    active_id = await source.get_active_plan_id()
    if active_id:
        await target.set_active_plan_id(active_id)

    logger.info("Migrated %d plans", len(plans))
    return len(plans)


def main():
    parser = ArgumentParser(description=__doc__)
    parser.add_argument("source", help="Path of the local JSON storage file")
    parser.add_argument("--token", help="Session token for api storage")
    parser.add_argument("--user-id", help="User id for firestore storage")
    args = parser.parse_args()

    settings = get_settings()
    if settings.STORAGE_TYPE == "localStorage":
        parser.error("STORAGE_TYPE must name a remote storage (api or firestore)")

    source = LocalStorageService(JsonFileKeyValueArea(args.source))
    target = create_storage_service(settings, token=args.token, user_id=args.user_id)
    asyncio.run(migrate(source, target))


if __name__ == "__main__":
    setup_logging()
    main()
