"""Tests for catalog_crawler/extraction/record_filter.py"""

from catalog_crawler.extraction.record_filter import filter_accepted, is_accepted
from catalog_crawler.models import UNTITLED_PRODUCT


class TestIsAccepted:
    def test_named_record_with_sku(self, make_record):
        assert is_accepted(make_record())

    def test_untitled_rejected(self, make_record):
        assert not is_accepted(make_record(name=UNTITLED_PRODUCT))

    def test_empty_name_rejected(self, make_record):
        assert not is_accepted(make_record(name=""))

    def test_empty_sku_rejected(self, make_record):
        assert not is_accepted(make_record(sku=""))


class TestFilterAccepted:
    def test_keeps_order(self, make_record):
        records = [
            make_record(sku="TAY-1", name="A"),
            make_record(sku="TAY-2", name=UNTITLED_PRODUCT),
            make_record(sku="TAY-3", name="C"),
        ]
        assert [r.sku for r in filter_accepted(records)] == ["TAY-1", "TAY-3"]

    def test_empty(self):
        assert filter_accepted([]) == []
