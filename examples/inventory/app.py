"""Inventory — controller inheritance over a small in-memory stock list.

``Catalog`` serves read endpoints; ``Warehouse`` extends it with writes.
Mounting ``Warehouse`` serves both sets: inherited endpoints keep the
paths of the class that declared them.

    GET    /api/Catalog/lookup     args=["sku-1"]
    GET    /api/Catalog/search     args=[{"maxPrice": 10}]
    POST   /api/Warehouse/restock  {"args": ["sku-1", 5]}
    DELETE /api/Warehouse/discontinue  args=["sku-1"]

The caller-side stub table is served at ``/api/__client__.js``.

Run:
    cd examples/inventory && tern routes app
"""

import threading
from dataclasses import dataclass, replace

from tern import App, Controller, api

SKU = {"type": "string", "pattern": "^sku-[0-9]+$"}
QUANTITY = {"type": "integer", "minimum": 1}
FILTER = {
    "type": "object",
    "properties": {
        "maxPrice": {"type": "number", "minimum": 0},
        "inStock": {"type": "boolean"},
    },
    "additionalProperties": False,
}


# ---------------------------------------------------------------------------
# In-memory storage (thread-safe for free-threading)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Item:
    sku: str
    name: str
    price: float
    quantity: int


_items: dict[str, Item] = {
    "sku-1": Item("sku-1", "Lantern", 12.5, 4),
    "sku-2": Item("sku-2", "Rope", 6.0, 0),
    "sku-3": Item("sku-3", "Compass", 9.75, 2),
}
_lock = threading.Lock()


def _to_dict(item: Item) -> dict:
    return {"sku": item.sku, "name": item.name, "price": item.price, "quantity": item.quantity}


# ---------------------------------------------------------------------------
# Controllers
# ---------------------------------------------------------------------------


class Catalog(Controller):
    @api(params=[SKU])
    def lookup(self, sku, context):
        """One item by SKU."""
        with _lock:
            item = _items.get(sku)
        if item is None:
            context.error(f"Unknown SKU {sku}", status=404)
            return
        context.data(_to_dict(item))

    @api(params=[FILTER])
    def search(self, filters, context):
        """Items matching every given filter, cheapest first."""
        with _lock:
            items = sorted(_items.values(), key=lambda i: i.price)
        if "maxPrice" in filters:
            items = [i for i in items if i.price <= filters["maxPrice"]]
        if "inStock" in filters:
            items = [i for i in items if (i.quantity > 0) == filters["inStock"]]
        context.data([_to_dict(i) for i in items])


class Warehouse(Catalog):
    @api("POST", params=[SKU, QUANTITY])
    def restock(self, sku, quantity, context):
        with _lock:
            item = _items.get(sku)
            if item is None:
                context.error(f"Unknown SKU {sku}", status=404)
                return
            item = _items[sku] = replace(item, quantity=item.quantity + quantity)
        context.data(_to_dict(item))

    @api("DELETE", params=[SKU])
    async def discontinue(self, sku, context):
        with _lock:
            _items.pop(sku, None)


app = App()
app.mount(Warehouse)
