"""Shared fixtures: a small in-memory furniture catalog."""

import pytest

from furniture_search.catalog import InMemoryCatalog
from furniture_search.search_service import SearchService

CATEGORIES = [
    {"_id": "cat-living", "name": "Living Room", "slug": "living-room"},
    {"_id": "cat-dining", "name": "Dining", "slug": "dining"},
]

SUBCATEGORIES = [
    {"_id": "sub-sofas", "name": "Sofas", "slug": "sofas"},
    {"_id": "sub-chairs", "name": "Chairs", "slug": "chairs"},
]


@pytest.fixture
def products() -> list[dict]:
    return [
        {
            "_id": "p1",
            "name": "Grey Fabric 3-Seater Sofa",
            "brand": "Urban Nest",
            "material": "fabric",
            "colorOptions": ["grey"],
            "tags": ["sofa", "living room"],
            "attributes": {"seater": 3, "material": "fabric", "color": "grey"},
            "categoryId": "cat-living",
            "subCategoryId": "sub-sofas",
            "inStockQuantity": 5,
            "isFeatured": False,
            "isPublished": True,
            "reviews": {"average": 4.5, "count": 18},
            "totalSold": 120,
            "viewCount": 900,
            "createdAt": "2024-03-01T10:00:00Z",
        },
        {
            "_id": "p2",
            "name": "Leather Sofa Set",
            "brand": "Casa Luxe",
            "material": "leather",
            "colorOptions": ["brown"],
            "tags": ["sofa"],
            "attributes": {"seater": 2, "material": "leather"},
            "categoryId": "cat-living",
            "subCategoryId": "sub-sofas",
            "inStockQuantity": 2,
            "isFeatured": True,
            "isPublished": True,
            "reviews": {"average": 4.0, "count": 7},
            "totalSold": 40,
            "viewCount": 300,
            "createdAt": "2024-01-15T10:00:00Z",
        },
        {
            "_id": "p3",
            "name": "Oak Dining Chair",
            "brand": "WoodCraft",
            "material": "oak",
            "colorOptions": ["brown"],
            "tags": ["chair", "dining"],
            "attributes": {"material": "wood"},
            "categoryId": "cat-dining",
            "subCategoryId": "sub-chairs",
            "inStockQuantity": 10,
            "isFeatured": False,
            "isPublished": True,
            "reviews": {"average": 4.8, "count": 30},
            "totalSold": 75,
            "viewCount": 400,
            "createdAt": "2023-11-20T10:00:00Z",
        },
        {
            "_id": "p4",
            "name": "Walnut Coffee Table",
            "brand": "WoodCraft",
            "material": "walnut",
            "tags": ["table"],
            "categoryId": "cat-living",
            "inStockQuantity": 0,
            "isFeatured": False,
            "isPublished": True,
            "reviews": {"average": 3.9, "count": 4},
            "totalSold": 12,
            "viewCount": 80,
            "createdAt": "2023-09-01T10:00:00Z",
        },
        {
            "_id": "p5",
            "name": "Blue Velvet Sofa",
            "brand": "Casa Luxe",
            "material": "velvet",
            "tags": ["sofa"],
            "attributes": {"seater": 3},
            "inStockQuantity": 4,
            "isFeatured": True,
            "isPublished": False,
            "reviews": {"average": 5.0, "count": 2},
            "createdAt": "2024-05-01T10:00:00Z",
        },
        {
            "_id": "p6",
            "name": "Classic Sectional",
            "brand": "Casa Luxe",
            "material": "fabric",
            "tags": ["sofa"],
            "attributes": {"seater": 5},
            "categoryId": "cat-living",
            "inStockQuantity": 3,
            "isFeatured": False,
            "isPublished": True,
            "reviews": {"average": 4.1, "count": 9},
            "totalSold": 20,
            "viewCount": 150,
            "createdAt": "2023-12-10T10:00:00Z",
        },
    ]


@pytest.fixture
def catalog(products) -> InMemoryCatalog:
    return InMemoryCatalog(products, CATEGORIES, SUBCATEGORIES)


@pytest.fixture
def service(catalog) -> SearchService:
    return SearchService(catalog)
