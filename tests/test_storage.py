# tests/test_storage.py
from conftest import make_item

from panelstore.db.sqlite import init_db, kv_delete, kv_get, kv_set
from panelstore.services.cart import CartStore, SqliteCartStorage


def test_kv_roundtrip(tmp_path):
    db = str(tmp_path / "data" / "store.db")
    init_db(db)
    assert kv_get("cart", db) is None
    kv_set("cart", "one", db)
    kv_set("cart", "two", db)
    assert kv_get("cart", db) == "two"
    kv_delete("cart", db)
    assert kv_get("cart", db) is None


def test_init_db_is_repeatable(tmp_path):
    db = str(tmp_path / "store.db")
    init_db(db)
    kv_set("k", "v", db)
    init_db(db)
    assert kv_get("k", db) == "v"


def test_cart_survives_restart(tmp_path):
    db = str(tmp_path / "store.db")
    init_db(db)

    first = CartStore(SqliteCartStorage(db), "cart")
    first.add_item(make_item("a", 12.0))
    first.add_item(make_item("b", 3.0))
    first.update_quantity("b", 0)

    second = CartStore(SqliteCartStorage(db), "cart")
    restored = second.restore()
    assert restored == first.state
    assert [it.product_id for it in restored.items] == ["a"]


def test_corrupt_row_is_dropped(tmp_path):
    db = str(tmp_path / "store.db")
    init_db(db)
    kv_set("cart", '{"items": "nope"}', db)

    store = CartStore(SqliteCartStorage(db), "cart")
    assert store.restore().total_items == 0
    assert kv_get("cart", db) is None
