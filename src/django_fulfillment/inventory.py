"""Vendor inventory aging.

The vendor deletes products that have not been ordered for 180 days. We keep
the last successful order time of every product we ship and warn the admin once
a product passes 150 days. Only products ordered through this app are tracked;
products set up at the vendor but never ordered are invisible here.

The inventory is one JSON blob shared by all customers, so writes go through
an optimistic version check (see save_inventory).
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional, Union

from django.db import transaction
from django.utils import timezone

from .conf import get_setting
from .exceptions import StaleInventoryError
from .models import FulfillmentSettings, StoredBlob

logger = logging.getLogger(__name__)

INVENTORY_KEY = "fulfillment-inventory"
ALERT_AFTER = timedelta(days=150)
EXPIRE_AFTER = timedelta(days=180)
SECONDS_PER_DAY = 86400

Inventory = dict[str, int]


@dataclass(frozen=True)
class InventorySweep:
    """Result of an aging sweep.

    alerts maps product id -> whole days since last order. expired holds the
    entries removed from inventory (product id -> last order timestamp).
    """

    alerts: dict = field(default_factory=dict)
    inventory: dict = field(default_factory=dict)
    expired: dict = field(default_factory=dict)


@dataclass(frozen=True)
class VersionedInventory:
    inventory: Inventory
    version: int


def _timestamp(now: Union[datetime, int, float, None]) -> int:
    if now is None:
        now = timezone.now()
    if isinstance(now, datetime):
        return int(now.timestamp())
    return int(now)


def sweep(now, inventory: Inventory) -> InventorySweep:
    """
    Find aging products and prune expired ones.

    Args:
        now: Current time (datetime or Unix timestamp)
        inventory: Product id -> last order Unix timestamp

    Returns:
        InventorySweep with alerts, the pruned inventory and expired entries
    """
    now_ts = _timestamp(now)
    alert_seconds = int(ALERT_AFTER.total_seconds())
    expire_seconds = int(EXPIRE_AFTER.total_seconds())

    alerts = {}
    expired = {}
    kept = {}
    for product_id, last_ordered in inventory.items():
        age = now_ts - int(last_ordered)
        if age >= alert_seconds:
            alerts[product_id] = age // SECONDS_PER_DAY
        if age >= expire_seconds:
            expired[product_id] = last_ordered
        else:
            kept[product_id] = last_ordered

    return InventorySweep(alerts=alerts, inventory=kept, expired=expired)


def touch(inventory: Inventory, product_ids: Iterable[str], now=None) -> Inventory:
    """Return a copy of inventory with each product's last order time set to now."""
    now_ts = _timestamp(now)
    updated = dict(inventory)
    for product_id in product_ids:
        updated[product_id] = now_ts
    return updated


def _decode(value: str) -> Inventory:
    if not value:
        return {}
    try:
        data = json.loads(value)
    except ValueError:
        logger.warning("Inventory blob is not valid JSON, treating as empty")
        return {}
    if not isinstance(data, dict):
        logger.warning("Inventory blob is not a mapping, treating as empty")
        return {}
    return {str(k): int(v) for k, v in data.items()}


def load_inventory(for_update: bool = False) -> VersionedInventory:
    """
    Load the inventory and the version it was read at.

    Args:
        for_update: Lock the blob row until the surrounding transaction ends.
            Must be called inside transaction.atomic().
    """
    blobs = StoredBlob.objects.filter(key=INVENTORY_KEY)
    if for_update:
        blobs = blobs.select_for_update()
    blob = blobs.first()
    if blob is None:
        return VersionedInventory(inventory={}, version=0)
    inventory = _decode(blob.value)
    logger.debug("Get inventory (v%s): %s", blob.version, inventory)
    return VersionedInventory(inventory=inventory, version=blob.version)


def save_inventory(inventory: Inventory, expected_version: int) -> int:
    """
    Save the inventory if nobody else saved since expected_version.

    Args:
        inventory: Complete inventory mapping to store
        expected_version: Version returned by load_inventory()

    Returns:
        The new version

    Raises:
        StaleInventoryError: If the stored version moved on
    """
    value = json.dumps(inventory, sort_keys=True)
    logger.debug("Setting inventory (v%s): %s", expected_version + 1, value)

    with transaction.atomic():
        if expected_version == 0:
            _, created = StoredBlob.objects.get_or_create(
                key=INVENTORY_KEY,
                defaults={"value": value, "version": 1},
            )
            if created:
                return 1

        updated = StoredBlob.objects.filter(
            key=INVENTORY_KEY,
            version=expected_version,
        ).update(value=value, version=expected_version + 1, updated_at=timezone.now())

    if not updated:
        raise StaleInventoryError(expected_version)
    return expected_version + 1


def update_inventory(
    mutator: Callable[[Inventory], Inventory],
    retries: Optional[int] = None,
) -> Inventory:
    """
    Read-modify-write the inventory, retrying on concurrent updates.

    The mutator may run more than once and must derive its result from the
    inventory it is given. Inside a transaction the blob row is read with
    select_for_update(), so a retry sees the latest committed version even
    under REPEATABLE READ isolation.

    Args:
        mutator: Receives the current inventory, returns the new one
        retries: Extra attempts after a version conflict
            (default FULFILLMENT_INVENTORY_RETRIES)

    Returns:
        The inventory as saved

    Raises:
        StaleInventoryError: If every attempt hit a version conflict
    """
    if retries is None:
        retries = get_setting("INVENTORY_RETRIES")

    attempt = 0
    while True:
        current = load_inventory(for_update=transaction.get_connection().in_atomic_block)
        new_inventory = mutator(dict(current.inventory))
        try:
            save_inventory(new_inventory, current.version)
            return new_inventory
        except StaleInventoryError:
            attempt += 1
            if attempt > retries:
                raise
            logger.info("Inventory changed concurrently, retrying (%s/%s)", attempt, retries)


def record_shipped(product_ids: Iterable[str], now=None) -> Inventory:
    """Refresh the last order time of shipped products."""
    product_ids = list(product_ids)
    return update_inventory(lambda inventory: touch(inventory, product_ids, now))


def format_expiry_warning(alerts: dict) -> tuple[str, str]:
    subject = "Fulfillment: Product expiry warning!"
    lines = [
        "Products not purchased for a period of 180 days will be deleted "
        "automatically by the vendor without warning. The following products "
        "MAY be at risk of deletion unless they have been ordered elsewhere:",
        "",
    ]
    for product_id, days in sorted(alerts.items()):
        lines.append(f"{product_id}, last ordered {days} days ago")
    return subject, "\n".join(lines)


def run_inventory_sweep(now=None, dry_run: bool = False) -> Optional[InventorySweep]:
    """
    Daily inventory check.

    No-op when the check_inventory option is off or nothing is tracked.
    Expired products are removed from the stored inventory and the admin is
    warned about every product past the alert age.

    Args:
        now: Current time (defaults to timezone.now())
        dry_run: Compute the sweep without saving or alerting

    Returns:
        The InventorySweep, or None if the sweep did not run
    """
    from .notifier import warn_admin

    if not FulfillmentSettings.get_instance().check_inventory:
        return None

    current = load_inventory()
    if not current.inventory:
        return None

    now = _timestamp(now)
    result = sweep(now, current.inventory)
    if dry_run:
        return result

    if result.expired:
        logger.warning(
            "Removing %s expired products from inventory: %s",
            len(result.expired),
            ", ".join(sorted(result.expired)),
        )
        update_inventory(lambda inventory: sweep(now, inventory).inventory)

    if result.alerts:
        warn_admin(*format_expiry_warning(result.alerts))

    return result
