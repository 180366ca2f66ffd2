from typing import List

from app.core.errors import NotFound
from app.services.store import BandStore


def reorder_gallery(store: BandStore, item_id: str, target_index: int) -> List[str]:
    """Move ``item_id`` to ``target_index`` and renumber the whole gallery.

    Strategy:
    - Read the gallery in display order.
    - Pop the item and reinsert it at ``target_index`` (clamped to the list).
    - Rewrite every item's order to its 1-based position in one transaction.

    Returns the new id sequence.
    """
    ids = [item["id"] for item in store.list_gallery()["items"]]
    if item_id not in ids:
        raise NotFound("Photo not found")
    ids.remove(item_id)
    position = min(max(0, int(target_index)), len(ids))
    ids.insert(position, item_id)
    store.rewrite_gallery_order(ids)
    return ids
