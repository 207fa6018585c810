"""Items API: a versioned JSON API built from middleware chains.

``v1`` and ``v2`` expose the same in-memory items with different payload
shapes. Writes require a bearer token; every route shares the
``authenticate`` and ``load_item`` steps, then a version-specific renderer
finishes the chain.

Run:
    chainmux run app:server
"""

import threading
from dataclasses import dataclass, field

from chainmux import Server, new_simple_logger
from chainmux.routing.params import convert_param

TOKEN = "Bearer letmein"


# ---------------------------------------------------------------------------
# In-memory storage
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Item:
    id: int
    title: str
    done: bool = False


@dataclass(slots=True)
class Store:
    items: dict[int, Item] = field(default_factory=dict)
    next_id: int = 1
    lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, title: str) -> Item:
        with self.lock:
            item = Item(id=self.next_id, title=title)
            self.items[item.id] = item
            self.next_id += 1
            return item


@dataclass(slots=True)
class RequestState:
    """Built fresh for every request; holds what earlier steps loaded."""

    store: Store
    item: Item | None = None


_store = Store()


# ---------------------------------------------------------------------------
# Middlewares
# ---------------------------------------------------------------------------


def authenticate(writer, request, ctx):
    if request.method != "GET" and request.headers.get("authorization") != TOKEN:
        ctx.response.error("unauthorized", 401)
        return None
    return ctx.next()


def load_item(writer, request, ctx):
    item = ctx.app.store.items.get(convert_param(ctx.path_params["id"], "int"))
    if item is None:
        ctx.response.error("item not found", 404)
        return None
    ctx.app.item = item
    return ctx.next()


def list_items(writer, request, ctx):
    items = sorted(ctx.app.store.items.values(), key=lambda i: i.id)
    ctx.response.json([{"id": i.id, "title": i.title, "done": i.done} for i in items])


async def create_item(writer, request, ctx):
    payload = await request.json()
    title = payload.get("title", "").strip()
    if not title:
        ctx.response.error("title is required", 422)
        return None
    item = ctx.app.store.add(title)
    writer.headers.set("Location", f"/v1/items/{item.id}")
    ctx.response.json({"id": item.id, "title": item.title, "done": item.done}, 201)
    return None


def complete_item(writer, request, ctx):
    ctx.app.item.done = True
    writer.write_header(204)


def render_v1(writer, request, ctx):
    item = ctx.app.item
    ctx.response.json({"id": item.id, "title": item.title, "done": item.done})


def render_v2(writer, request, ctx):
    item = ctx.app.item
    ctx.response.json({"data": {"id": item.id, "title": item.title, "status": _status(item)}})


def _status(item: Item) -> str:
    return "done" if item.done else "open"


def not_found(writer, request, ctx):
    ctx.response.json({"error": "no such endpoint", "path": request.path}, 404)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

server = Server("127.0.0.1", 8000)
server.set_logger(new_simple_logger("items_api"))
server.set_app_context(lambda: RequestState(store=_store))

server.serve("GET", "/v1/items", authenticate, list_items)
server.serve("POST", "/v1/items", authenticate, create_item)
server.serve("GET", "/v1/items/{id:int}", authenticate, load_item, render_v1)
server.serve("PUT", "/v1/items/{id:int}/done", authenticate, load_item, complete_item)
server.serve("GET", "/v2/items/{id:int}", authenticate, load_item, render_v2)
server.serve_not_found(not_found)


if __name__ == "__main__":
    server.listen()
