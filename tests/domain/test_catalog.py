"""
Tests for the Product and Location catalog entities.
"""

from decimal import Decimal

import pytest

from wms_modules.inventory.models import Location, Product


class TestProduct:

    def test_create_normalizes_sku(self):
        product = Product.create(" widget-1 ", " Widget ").value
        assert product.sku == "WIDGET-1"
        assert product.name == "Widget"
        assert product.is_active

    def test_volume(self):
        product = Product.create("BOX", "Box", length=Decimal("2"), width=Decimal("3"),
                                 height=Decimal("4")).value
        assert product.volume == Decimal("24")

    @pytest.mark.parametrize("kwargs, code", [
        ({"sku": " "}, "Product.Sku"),
        ({"sku": "S" * 51}, "Product.Sku"),
        ({"name": ""}, "Product.Name"),
        ({"name": "N" * 201}, "Product.Name"),
        ({"weight": Decimal("-1")}, "Product.Weight"),
        ({"height": Decimal("-0.1")}, "Product.Dimensions"),
    ])
    def test_validation(self, kwargs, code):
        args = {"sku": "SKU-1", "name": "Name"} | kwargs
        assert Product.create(**args).error.code == code

    def test_update(self):
        product = Product.create("SKU-1", "Old").value
        result = product.update("New", "desc", Decimal("1"), Decimal("1"), Decimal("1"), Decimal("1"))
        assert result.is_success
        assert product.name == "New"
        assert product.sku == "SKU-1"

    def test_update_rejects_invalid_and_keeps_state(self):
        product = Product.create("SKU-1", "Old").value
        result = product.update("", None, Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0"))
        assert result.is_failure
        assert product.name == "Old"

    def test_activation(self):
        product = Product.create("SKU-1", "Name").value
        product.deactivate()
        assert not product.is_active
        product.activate()
        assert product.is_active


class TestLocation:

    def test_create_builds_code_and_default_name(self):
        location = Location.create("a", 1, 2, 3).value
        assert location.code == "A-01-02-03"
        assert location.name == "Zone A, Aisle 1, Rack 2, Bin 3"
        assert location.capacity == 100

    def test_create_from_code(self):
        location = Location.create_from_code("b-10-20-30", capacity=5).value
        assert (location.zone, location.aisle, location.rack, location.bin) == ("B", 10, 20, 30)
        assert location.capacity == 5

    @pytest.mark.parametrize("code", ["", "A-1-2-3", "AA-01-02-03", "A-01-02"])
    def test_create_from_bad_code(self, code):
        assert Location.create_from_code(code).error.code == "Location.Code"

    @pytest.mark.parametrize("args, code", [
        (("1", 1, 1, 1), "Location.Zone"),
        (("AB", 1, 1, 1), "Location.Zone"),
        (("A", 0, 1, 1), "Location.Aisle"),
        (("A", 1, 100, 1), "Location.Rack"),
        (("A", 1, 1, 0), "Location.Bin"),
    ])
    def test_validation(self, args, code):
        assert Location.create(*args).error.code == code

    def test_capacity(self):
        assert Location.create("A", 1, 1, 1, capacity=0).error.code == "Location.Capacity"
        location = Location.create("A", 1, 1, 1).value
        assert location.update_capacity(0).is_failure
        assert location.update_capacity(250).is_success
        assert location.capacity == 250
