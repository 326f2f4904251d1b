from sqlalchemy import insert

from backend import database
from backend import tables as t


def test_list_items_preview_shows_first_variant(client):
    resp = client.get("/api/v1/items/")
    assert resp.status_code == 200
    items = resp.json()
    assert [i["id"] for i in items] == [1, 2, 3, 4]
    first = items[0]
    assert first["brand_name"] == "Lancôme"
    assert first["type_name"] == "Eau de Parfum"
    assert first["size"] == 30
    assert first["price"] == 38.95
    assert first["base_size"] == 100
    assert first["base_price"] == 129.83
    assert first["rating"] == 4.3
    assert "variants" not in first


def test_list_items_filtered_by_ids(client):
    resp = client.get("/api/v1/items/", params={"id": "2,4"})
    assert resp.status_code == 200
    assert [i["id"] for i in resp.json()] == [2, 4]


def test_list_items_rejects_non_integer_ids(client):
    resp = client.get("/api/v1/items/", params={"id": "1,abc"})
    assert resp.status_code == 400
    assert "message" in resp.json()


def test_list_items_sorted_by_price(client):
    asc = client.get("/api/v1/items/", params={"sort": "price asc"}).json()
    prices = [i["price"] for i in asc]
    assert prices == sorted(prices)
    assert [i["id"] for i in asc] == [1, 4, 2, 3]

    desc = client.get("/api/v1/items/", params={"sort": "price desc"}).json()
    assert [i["id"] for i in desc] == [3, 2, 4, 1]


def test_list_items_sorted_by_name(client):
    names = [i["name"] for i in client.get("/api/v1/items/", params={"sort": "name asc"}).json()]
    assert names == ["Acqua di Giò", "Coco Mademoiselle", "La vie est belle", "Sauvage"]
    names = [i["name"] for i in client.get("/api/v1/items/", params={"sort": "name desc"}).json()]
    assert names[0] == "Sauvage"


def test_unknown_sort_falls_back_to_id_order(client):
    resp = client.get("/api/v1/items/", params={"sort": "bogus; DROP TABLE item"})
    assert resp.status_code == 200
    assert [i["id"] for i in resp.json()] == [1, 2, 3, 4]


def test_list_items_with_all_variants(client, monkeypatch):
    monkeypatch.setattr(database.settings, "ITEM_LIST_VARIANTS", "all")

    items = client.get("/api/v1/items/", params={"sort": "price asc"}).json()

    assert [i["id"] for i in items] == [1, 4, 2, 3]
    sizes = [v["size"] for v in items[0]["variants"]]
    assert sizes == [30, 50, 100]
    assert items[0]["variants"][2]["base_price"] == 89.95


def test_get_item_nests_variants(client):
    resp = client.get("/api/v1/items/1")
    assert resp.status_code == 200
    item = resp.json()
    assert item["id"] == 1
    assert item["description"].startswith("Iris")
    assert len(item["variants"]) == 3
    assert [v["size"] for v in item["variants"]] == [30, 50, 100]
    assert item["variants"][0] == {
        "size": 30,
        "stock": 120,
        "price": 38.95,
        "original_price": 62.5,
        "discount_amount": 23.55,
        "discount_percentage": 38.0,
        "base_size": 100,
        "base_price": 129.83,
    }
    for field in ("size", "price", "stock"):
        assert field not in item


def test_get_item_without_variants(client):
    database.execute(insert(t.item).values(brand_id=1, type_id=1, category_id=1, name="Idôle"))

    resp = client.get("/api/v1/items/5")

    assert resp.status_code == 200
    assert resp.json()["variants"] == []


def test_get_missing_item_is_404(client):
    resp = client.get("/api/v1/items/999")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Item not found."}


def test_get_item_with_bad_id_is_400(client):
    assert client.get("/api/v1/items/abc").status_code == 400


def test_list_variants(client):
    variants = client.get("/api/v1/items/2/variants").json()
    assert [v["size"] for v in variants] == [60, 100]
    assert variants[0]["item_id"] == 2
    assert variants[0]["base_price"] == 121.5
    assert "created" in variants[0]


def test_list_variants_of_missing_item_is_404(client):
    assert client.get("/api/v1/items/999/variants").status_code == 404


def test_get_variant_by_size(client):
    resp = client.get("/api/v1/items/1/variants/50")
    assert resp.status_code == 200
    assert resp.json()["price"] == 59.95
    assert resp.json()["base_price"] == 119.9


def test_get_missing_variant_is_404(client):
    assert client.get("/api/v1/items/1/variants/75").status_code == 404

# ---------- Brands ----------

def test_list_brands(client):
    brands = client.get("/api/v1/items/brands").json()
    assert brands[0] == {"brand_id": 1, "brand_name": "Lancôme"}
    assert len(brands) == 4


def test_get_brand(client):
    assert client.get("/api/v1/items/brands/2").json() == {"brand_id": 2, "brand_name": "Dior"}
    assert client.get("/api/v1/items/brands/99").status_code == 404


def test_brand_lifecycle(client):
    created = client.post("/api/v1/items/brands", json={"brand_name": "Hermès"})
    assert created.status_code == 201
    brand_id = created.json()["brandId"]

    updated = client.put(f"/api/v1/items/brands/{brand_id}", json={"brand_name": "Hermès Paris"})
    assert updated.json() == {"changedRows": 1}
    assert client.get(f"/api/v1/items/brands/{brand_id}").json()["brand_name"] == "Hermès Paris"

    deleted = client.delete(f"/api/v1/items/brands/{brand_id}")
    assert deleted.json() == {"affectedRows": 1}
    assert client.get(f"/api/v1/items/brands/{brand_id}").status_code == 404


def test_create_brand_requires_name(client):
    resp = client.post("/api/v1/items/brands", json={"brand_name": ""})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid request."


def test_update_missing_brand_is_404(client):
    assert client.put("/api/v1/items/brands/99", json={"brand_name": "X"}).status_code == 404


def test_delete_missing_brand_is_404(client):
    assert client.delete("/api/v1/items/brands/99").status_code == 404


def test_delete_brand_in_use_is_409(client):
    resp = client.delete("/api/v1/items/brands/1")
    assert resp.status_code == 409
    assert client.get("/api/v1/items/brands/1").status_code == 200


def test_list_items_without_trailing_slash(client):
    resp = client.get("/api/v1/items", params={"id": "3"}, follow_redirects=False)
    assert resp.status_code == 200
    assert [i["id"] for i in resp.json()] == [3]
