from typing import Dict, Iterable, List, Sequence

from results import ErrorKind, QueryResult


def move_item(ordered_ids: Sequence[str], from_index: int, to_index: int) -> List[Dict]:
    """Dense zero-based reassignment produced by dragging one item to a new slot."""
    items = list(ordered_ids)
    if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
        raise IndexError("move index out of range")
    moved = items.pop(from_index)
    items.insert(to_index, moved)
    return [{"id": item_id, "display_order": index} for index, item_id in enumerate(items)]


def validate_submission(assignments: Iterable[Dict]) -> QueryResult[List[Dict]]:
    """Reject malformed order submissions before any store access.

    Orders are taken as submitted; only duplicates and negative values are refused.
    """
    cleaned: List[Dict] = []
    seen_ids = set()
    seen_orders = set()
    for item in assignments:
        item_id = str(item.get("id") or "").strip()
        order = item.get("display_order")
        if not item_id:
            return QueryResult.fail("Each competition needs an id", ErrorKind.VALIDATION)
        if isinstance(order, bool) or not isinstance(order, int) or order < 0:
            return QueryResult.fail(f"Invalid display order for competition {item_id}", ErrorKind.VALIDATION)
        if item_id in seen_ids:
            return QueryResult.fail(f"Duplicate competition {item_id} in order", ErrorKind.VALIDATION)
        if order in seen_orders:
            return QueryResult.fail(f"Duplicate display order {order}", ErrorKind.VALIDATION)
        seen_ids.add(item_id)
        seen_orders.add(order)
        cleaned.append({"id": item_id, "display_order": order})
    if not cleaned:
        return QueryResult.fail("No competitions to reorder", ErrorKind.VALIDATION)
    return QueryResult.ok(cleaned)


def is_dense(orders: Iterable[int]) -> bool:
    values = sorted(orders)
    return values == list(range(len(values)))
