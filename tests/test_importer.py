"""Catalog file loading and field normalization."""

import json

from furniture_search.importer import LFS_POINTER_PREFIX, load_catalog


def test_load_catalog_with_references(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "products": [
                    {
                        "_id": {"$oid": "64f0c0ffee"},
                        "title": "Teak Bed",
                        "featured": True,
                        "rating": 4.2,
                        "reviewCount": 11,
                        "stock": 3,
                        "colors": ["brown"],
                        "categoryId": {"$oid": "cat-bedroom"},
                        "attributes": {"seater": "2"},
                        "createdAt": {"$date": "2024-02-01T00:00:00Z"},
                    },
                    {"title": "No Id Stool"},
                ],
                "categories": [{"_id": "cat-bedroom", "name": "Bedroom", "slug": "bedroom", "extra": 1}],
                "subcategories": [{"slug": "beds", "name": "Beds"}],
            }
        ),
        encoding="utf-8",
    )

    catalog = load_catalog(path)

    assert len(catalog.products) == 1
    product = catalog.products[0]
    assert product["_id"] == "64f0c0ffee"
    assert product["name"] == "Teak Bed"
    assert product["isFeatured"] is True
    assert product["isPublished"] is True
    assert product["inStockQuantity"] == 3
    assert product["colorOptions"] == ["brown"]
    assert product["reviews"] == {"average": 4.2, "count": 11}
    assert product["categoryId"] == "cat-bedroom"
    assert product["attributes"]["seater"] == 2
    assert product["createdAt"] == "2024-02-01T00:00:00Z"
    assert "title" not in product and "featured" not in product
    assert catalog.categories == [{"_id": "cat-bedroom", "name": "Bedroom", "slug": "bedroom"}]
    assert catalog.subcategories == [{"_id": "beds", "name": "Beds", "slug": "beds"}]


def test_load_catalog_accepts_bare_list(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps([{"id": 7, "name": "Sofa", "isPublished": False}]), encoding="utf-8")

    catalog = load_catalog(path)

    assert catalog.products == [{"_id": "7", "name": "Sofa", "isPublished": False}]
    assert catalog.categories == []


def test_load_catalog_detects_lfs_pointer(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(f"{LFS_POINTER_PREFIX}\noid sha256:abc\nsize 123\n", encoding="utf-8")

    assert load_catalog(path).products == []


def test_load_catalog_missing_file(tmp_path):
    assert load_catalog(tmp_path / "missing.json").products == []
