"""Test order parsing models."""
import pytest
from pydantic import ValidationError
from fruttagest.models.orders import (
    ParsedOrderItem,
    ParsedOrderResult,
    RawExtraction,
    RawOrderItem,
    normalize_unit,
)


class TestNormalizeUnit:
    @pytest.mark.parametrize("word, code", [
        ("kg", "KG"),
        ("chili", "KG"),
        ("grammi", "G"),
        ("pz", "PEZZI"),
        ("casse", "CASSETTA"),
        ("Mazzi", "MAZZO"),
        ("grappoli", "GRAPPOLO"),
        ("vasetti", "VASETTO"),
        ("sacchetto", "SACCHETTO"),
        ("cassetta", "CASSETTA"),
    ])
    def test_italian_words(self, word, code):
        assert normalize_unit(word) == code

    def test_codes_are_uppercased(self):
        assert normalize_unit(" pezzi ") == "PEZZI"

    def test_unknown_unit_passes_through(self):
        assert normalize_unit("bancale") == "bancale"

    def test_null_strings(self):
        assert normalize_unit("null") is None
        assert normalize_unit(None) is None


class TestRawOrderItem:
    def test_alias_and_strip(self):
        item = RawOrderItem.model_validate({"productName": "  Mele Golden ", "quantity": 3, "unit": "casse"})
        assert item.product_name == "Mele Golden"
        assert item.unit == "CASSETTA"

    def test_decimal_comma(self):
        item = RawOrderItem.model_validate({"productName": "uva", "quantity": "2,5"})
        assert item.quantity == 2.5

    @pytest.mark.parametrize("written", ["q.b.", "un paio", "nan"])
    def test_unreadable_quantity_becomes_none(self, written):
        item = RawOrderItem.model_validate({"productName": "prezzemolo", "quantity": written})
        assert item.quantity is None

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            RawOrderItem.model_validate({"productName": "   ", "quantity": 1})


class TestRawExtraction:
    def test_null_items(self):
        assert RawExtraction.model_validate({"items": None}).items == []

    @pytest.mark.parametrize("written", ["2026-10-20", "22/10/2026", "venerdì"])
    def test_delivery_date_passes_through(self, written):
        assert RawExtraction.model_validate({"deliveryDate": written}).delivery_date == written

    def test_bad_quantity_keeps_the_line(self):
        extraction = RawExtraction.model_validate({"items": [
            {"productName": "pomodoro", "quantity": 5, "unit": "KG"},
            {"productName": "basilico", "quantity": "un paio", "unit": "mazzi"},
        ]})
        assert [(i.product_name, i.quantity) for i in extraction.items] == [("pomodoro", 5), ("basilico", None)]

    def test_invalid_line_dropped(self):
        extraction = RawExtraction.model_validate({"items": [{"productName": ""}, {"productName": "uva"}]})
        assert [i.product_name for i in extraction.items] == ["uva"]

    def test_items_must_be_a_list(self):
        with pytest.raises(ValidationError):
            RawExtraction.model_validate({"items": "uva"})

    def test_null_strings(self):
        extraction = RawExtraction.model_validate({"customerName": "None", "notes": " null "})
        assert extraction.customer_name is None
        assert extraction.notes is None

    def test_snake_case_accepted(self):
        extraction = RawExtraction(customer_name="Bar Centrale")
        assert extraction.customer_name == "Bar Centrale"


class TestParsedOrder:
    def test_confidence_follows_matched(self):
        assert ParsedOrderItem(product_name="mele", product_id="p1", matched=True).confidence == 1.0
        assert ParsedOrderItem(product_name="meleh").confidence == 0.5

    def test_whole_quantity_serialized_as_int(self):
        dumped = ParsedOrderItem(product_name="mele", quantity=5.0).model_dump(mode="json")
        assert dumped["quantity"] == 5
        assert isinstance(dumped["quantity"], int)
        assert ParsedOrderItem(product_name="mele", quantity=1.5).quantity == 1.5

    def test_confidence_serialized(self):
        dumped = ParsedOrderItem(product_name="mele", product_id="p1", matched=True).model_dump()
        assert dumped["confidence"] == 1.0

    def test_degraded(self):
        result = ParsedOrderResult.degraded("2 kg mele")
        assert result.items == []
        assert result.raw_text == "2 kg mele"
        assert result.extraction_failed is True

    def test_unmatched_items(self):
        matched = ParsedOrderItem(product_name="mele", product_id="p1", matched=True)
        unmatched = ParsedOrderItem(product_name="xyz")
        result = ParsedOrderResult(items=[matched, unmatched], raw_text="mele, xyz")
        assert result.unmatched_items == [unmatched]
