"""Tests for catalog loading and product validation."""

import sys
from pathlib import Path

import pandas as pd
import pytest

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from scripts.generate_sample_catalog import generate_catalog
from src.personalization.catalog import SAMPLE_PRODUCTS, StaticCatalog, load_catalog_csv
from src.personalization.exceptions import CatalogLoadError, InvalidProductError
from src.personalization.models import Product


def test_sample_catalog_shape():
    assert [p.id for p in SAMPLE_PRODUCTS] == ["1", "2", "3", "4", "5", "6"]
    assert sum(p.category == "Electronics" for p in SAMPLE_PRODUCTS) == 2


def test_static_catalog_provider():
    catalog = StaticCatalog(SAMPLE_PRODUCTS)

    assert list(catalog()) == SAMPLE_PRODUCTS
    assert len(catalog) == 6
    assert catalog.get("4").name == "Professional Camera Lens"
    assert catalog.get("missing") is None
    assert catalog.product_ids == ["1", "2", "3", "4", "5", "6"]


@pytest.mark.parametrize(
    "overrides",
    [{"price": -1.0}, {"rating": 5.5}, {"rating": -0.1}, {"reviews": -3}],
)
def test_product_validation(overrides):
    fields = dict(id="x", name="X", category="C", brand="B", price=1.0, rating=1.0, reviews=0)
    fields.update(overrides)

    with pytest.raises(InvalidProductError):
        Product(**fields)


def test_product_tags_become_tuple():
    product = Product(
        id="x", name="X", category="C", brand="B", price=1.0, rating=1.0, reviews=0, tags=["a", "b"]
    )

    assert product.tags == ("a", "b")
    assert product.to_dict()["tags"] == ["a", "b"]


def test_load_catalog_csv(tmp_path):
    csv_path = tmp_path / "catalog.csv"
    pd.DataFrame(
        [
            {
                "id": "10",
                "name": "Desk Lamp",
                "category": "Furniture",
                "brand": "Lumo",
                "price": 25.5,
                "rating": 4.1,
                "reviews": 12,
                "tags": "lamp|desk",
                "in_stock": False,
            },
            {
                "id": "11",
                "name": "USB Cable",
                "category": "Electronics",
                "brand": "Wire",
                "price": 5,
                "rating": 3.9,
                "reviews": 0,
                "tags": "",
                "in_stock": True,
            },
        ]
    ).to_csv(csv_path, index=False)

    products = load_catalog_csv(str(csv_path))

    assert [p.id for p in products] == ["10", "11"]
    lamp, cable = products
    assert lamp.tags == ("lamp", "desk")
    assert lamp.in_stock is False
    assert lamp.description == ""
    assert cable.tags == ()
    assert cable.price == 5.0


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalog_csv(str(tmp_path / "nope.csv"))


def test_load_catalog_missing_columns(tmp_path):
    csv_path = tmp_path / "catalog.csv"
    pd.DataFrame([{"id": "1", "name": "X"}]).to_csv(csv_path, index=False)

    with pytest.raises(CatalogLoadError) as exc_info:
        load_catalog_csv(str(csv_path))

    assert "brand" in exc_info.value.message


def test_load_catalog_invalid_row(tmp_path):
    csv_path = tmp_path / "catalog.csv"
    pd.DataFrame(
        [{"id": "1", "name": "X", "category": "C", "brand": "B", "price": -5, "rating": 1, "reviews": 1}]
    ).to_csv(csv_path, index=False)

    with pytest.raises(CatalogLoadError):
        load_catalog_csv(str(csv_path))


def test_generated_catalog_loads(tmp_path):
    """Test that the sample catalog script writes a loadable file."""
    csv_path = tmp_path / "generated.csv"
    generate_catalog(num_products=25, seed=1).to_csv(csv_path, index=False)

    products = load_catalog_csv(str(csv_path))

    assert len(products) == 25
    assert all(0 <= p.rating <= 5 for p in products)
    assert all(len(p.tags) == 2 for p in products)


def test_generate_catalog_rejects_non_positive():
    with pytest.raises(ValueError):
        generate_catalog(num_products=0)


def test_load_catalog_in_stock_tokens(tmp_path):
    """Test that in_stock text values are read as their meaning, not truthiness."""
    csv_path = tmp_path / "catalog.csv"
    header = "id,name,category,brand,price,rating,reviews,in_stock\n"
    rows = [
        "1,A,C,B,1,1,1,no",
        "2,A,C,B,1,1,1,false ",
        "3,A,C,B,1,1,1,Yes",
        "4,A,C,B,1,1,1,0",
        "5,A,C,B,1,1,1,",
    ]
    csv_path.write_text(header + "\n".join(rows) + "\n")

    products = load_catalog_csv(str(csv_path))

    assert [p.in_stock for p in products] == [False, False, True, False, True]


def test_load_catalog_invalid_in_stock(tmp_path):
    csv_path = tmp_path / "catalog.csv"
    csv_path.write_text(
        "id,name,category,brand,price,rating,reviews,in_stock\n1,A,C,B,1,1,1,maybe\n"
    )

    with pytest.raises(CatalogLoadError):
        load_catalog_csv(str(csv_path))
