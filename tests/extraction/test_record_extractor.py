"""Tests for catalog_crawler/extraction/record_extractor.py"""

import random
from datetime import timedelta

import pytest

from catalog_crawler.errors import ConfigError
from catalog_crawler.extraction.card_parser import CatalogCard, PaginationInfo
from catalog_crawler.ingestion import BulkIngestor
from catalog_crawler.extraction.record_extractor import (
    AVAILABLE_QTY,
    RecordExtractor,
    extract_product_id,
    has_next_page,
    parse_dimensions,
    parse_stock_quantity,
)
from catalog_crawler.models import UNTITLED_PRODUCT

PAGE_URL = "https://shop.example.com/sa/ar/category/mirrors?page=1"


def make_card(**overrides) -> CatalogCard:
    values = {
        "title": "  Chair  ",
        "color_dimensions": "أسود | 60 x 90 سم",
        "price": "120.00 ر.س",
        "stock": "متوفر",
        "image_url": "https://cdn.example.com/img/123.png",
        "link_url": "https://shop.example.com/sa/ar/products/123",
    }
    values.update(overrides)
    return CatalogCard(**values)


class TestExtractProductId:
    @pytest.mark.parametrize("link,expected", [
        ("https://shop.example.com/sa/ar/products/123", "123"),
        ("/sa/ar/products/abc-42", "abc-42"),
        ("https://shop.example.com/products/123/details", "123"),
        ("https://shop.example.com/products/123?ref=list", "123"),
        ("https://shop.example.com/products/123#top", "123"),
    ])
    def test_segment_after_products(self, link, expected):
        assert extract_product_id(link) == expected

    @pytest.mark.parametrize("link", ["", "https://shop.example.com/category/mirrors"])
    def test_no_products_segment(self, link):
        assert extract_product_id(link) == ""


class TestParseDimensions:
    @pytest.mark.parametrize("text,expected", [
        ("أسود | 60 x 90 سم", ("60", "90")),
        ("120x80", ("120", "80")),
        ("ذهبي | 45.5 x 100.25 سم", ("45.5", "100.25")),
        ("10 x 20 then 30 x 40", ("10", "20")),
    ])
    def test_first_pair(self, text, expected):
        assert parse_dimensions(text) == expected

    @pytest.mark.parametrize("text", ["", "أسود", "60 by 90"])
    def test_no_pair(self, text):
        assert parse_dimensions(text) == ("", "")


class TestParseStockQuantity:
    def test_remaining_arabic_digits(self):
        assert parse_stock_quantity("تبقى ٥") == 5

    def test_remaining_ascii_digits(self):
        assert parse_stock_quantity("تبقى 12 قطع") == 12

    def test_available(self):
        assert parse_stock_quantity("متوفر") == AVAILABLE_QTY

    def test_remaining_takes_precedence(self):
        assert parse_stock_quantity("متوفر - تبقى ٣") == 3

    @pytest.mark.parametrize("text", ["", "نفذت الكمية", None])
    def test_unknown_is_zero(self, text):
        assert parse_stock_quantity(text) == 0


class TestHasNextPage:
    def test_active_before_last(self):
        assert has_next_page(PaginationInfo(["١", "٢", "٣"], "٢")) is True

    def test_active_is_last(self):
        assert has_next_page(PaginationInfo(["١", "٢", "٣"], "٣")) is False

    def test_no_active_indicator(self):
        assert has_next_page(PaginationInfo(["1", "2"], None)) is False

    def test_no_numeric_labels(self):
        assert has_next_page(PaginationInfo(["...", "التالي"], "1")) is False

    def test_unparseable_active(self):
        assert has_next_page(PaginationInfo(["1", "2"], "...")) is False

    def test_non_numeric_labels_ignored(self):
        assert has_next_page(PaginationInfo(["1", "2", "...", "9"], "2")) is True

    def test_empty(self):
        assert has_next_page(PaginationInfo()) is False


class TestRecordExtractor:
    def test_unknown_default_field_raises(self):
        with pytest.raises(ConfigError):
            RecordExtractor(field_defaults={"not_a_field": "x"})

    def test_identity_fields(self, extractor):
        record = extractor.extract_card(make_card())
        assert record.sku == "TAY-123"
        assert record.barcode == "123"
        assert record.url_key == "TAY-123-chair"
        assert record.link_url == "https://shop.example.com/sa/ar/products/123"

    def test_name_is_trimmed_and_copied(self, extractor):
        record = extractor.extract_card(make_card())
        assert record.name == "Chair"
        assert record.meta_title == "Chair"
        assert record.description == "Chair"
        assert record.short_description == "Chair"

    def test_empty_title_is_untitled(self, extractor):
        record = extractor.extract_card(make_card(title="   "))
        assert record.name == UNTITLED_PRODUCT

    def test_color_and_dimensions(self, extractor):
        record = extractor.extract_card(make_card())
        assert record.color == "أسود"
        assert record.ts_dimensions_width == "60"
        assert record.ts_dimensions_height == "90"

    def test_missing_dimensions_default_to_zero(self, extractor):
        record = extractor.extract_card(make_card(color_dimensions="أسود"))
        assert record.ts_dimensions_width == "0"
        assert record.ts_dimensions_height == "0"

    def test_price(self, extractor):
        assert extractor.extract_card(make_card()).price == "120.00"

    def test_price_with_arabic_digits(self, extractor):
        assert extractor.extract_card(make_card(price="١٥٠ ر.س")).price == "150"

    def test_fractional_price_with_leading_dot(self, extractor):
        assert extractor.extract_card(make_card(price=".5")).price == ".5"
        assert extractor.extract_card(make_card(price="٠.٥ ر.س")).price == "0.5"

    def test_missing_price_is_zero(self, extractor):
        assert extractor.extract_card(make_card(price="")).price == "0"

    def test_remaining_stock(self, extractor):
        record = extractor.extract_card(make_card(stock="تبقى ٥"))
        assert record.qty == 5
        assert record.max_cart_qty == 5
        assert record.is_in_stock == 1

    def test_oversized_remaining_stock_is_kept_as_parsed(self, extractor):
        record = extractor.extract_card(make_card(stock="تبقى ٩٩٩٩٩٩٩٩٩٩٩٩٩٩٩٩٩٩٩٩"))
        assert record.qty == 99999999999999999999
        assert record.is_in_stock == 1

    def test_oversized_remaining_stock_is_ingestion_error(self, extractor, store):
        good = extractor.extract_card(make_card())
        huge = extractor.extract_card(make_card(
            link_url="https://shop.example.com/sa/ar/products/456",
            stock="تبقى 99999999999999999999",
        ))

        result = BulkIngestor(store).ingest([good, huge])

        assert [r.sku for r in result.successful] == ["TAY-123"]
        assert [entry.record.sku for entry in result.errors] == ["TAY-456"]
        assert store.count() == 1

    def test_available_stock(self, extractor):
        record = extractor.extract_card(make_card(stock="متوفر"))
        assert record.qty == 100
        assert record.is_in_stock == 1

    def test_out_of_stock(self, extractor):
        record = extractor.extract_card(make_card(stock="نفذت الكمية"))
        assert record.qty == 0
        assert record.max_cart_qty == 0
        assert record.is_in_stock == 0

    def test_images(self, extractor):
        record = extractor.extract_card(make_card())
        image = "https://cdn.example.com/img/123.png"
        assert record.base_image == image
        assert record.small_image == image
        assert record.swatch_image == image
        assert record.thumbnail_image == image
        assert record.additional_images.split(",") == [
            f"https://cdn.example.com/products/123/123_PI_{n}.png" for n in range(1, 5)
        ]

    def test_news_window(self, extractor, fixed_now):
        record = extractor.extract_card(make_card())
        assert record.news_from_date == fixed_now.isoformat()
        assert record.news_to_date == (fixed_now + timedelta(days=60)).isoformat()

    def test_field_defaults_applied(self, extractor):
        record = extractor.extract_card(make_card())
        assert record.categories1 == "أثاث وغرف"
        assert record.style == "عصري"
        assert record.supplier == "TAY"
        assert record.vendor_score == "2"
        assert record.store == "default"

    def test_fallback_sku_without_product_id(self, extractor, fixed_now):
        record = extractor.extract_card(make_card(link_url="https://shop.example.com/category/x"))
        prefix, millis, suffix = record.sku.split("-")
        assert prefix == "TAY"
        assert millis == str(int(fixed_now.timestamp() * 1000))
        assert len(suffix) == 9
        assert suffix.isalnum() and suffix == suffix.lower()
        assert record.barcode == ""
        assert record.additional_images == ""

    def test_fallback_skus_differ(self, field_defaults, fixed_now):
        extractor = RecordExtractor(
            field_defaults=field_defaults,
            clock=lambda: fixed_now,
            rng=random.Random(1),
        )
        card = make_card(link_url="")
        assert extractor.extract_card(card).sku != extractor.extract_card(card).sku

    def test_non_latin_name_slug(self, extractor):
        record = extractor.extract_card(make_card(title="مرآة حائط"))
        assert record.url_key == "TAY-123--"


class TestExtractPage:
    def test_records_and_continuation(self, extractor, make_soup, make_listing_html, make_card_html):
        html = make_listing_html(
            [make_card_html(product_id="1", title="A"), make_card_html(product_id="2", title="B")],
            page_labels=["١", "٢"],
            active="١",
        )
        extraction = extractor.extract_page(make_soup(html), PAGE_URL)

        assert [r.sku for r in extraction.records] == ["TAY-1", "TAY-2"]
        assert extraction.records[0].link_url == "https://shop.example.com/sa/ar/products/1"
        assert extraction.has_next_page is True

    def test_remaining_stock_card(self, extractor, make_soup, make_listing_html, make_card_html):
        html = make_listing_html([make_card_html(stock="تبقى ٥")])
        record = extractor.extract_page(make_soup(html), PAGE_URL).records[0]
        assert record.qty == 5
        assert record.is_in_stock == 1

    def test_last_page(self, extractor, make_soup, make_listing_html, make_card_html):
        html = make_listing_html([make_card_html()], page_labels=["1", "2"], active="2")
        assert extractor.extract_page(make_soup(html), PAGE_URL).has_next_page is False

    def test_page_without_pagination(self, extractor, make_soup, make_listing_html, make_card_html):
        html = make_listing_html([make_card_html()])
        assert extractor.extract_page(make_soup(html), PAGE_URL).has_next_page is False

    def test_shared_timestamp_per_page(self, extractor, make_soup, make_listing_html, make_card_html):
        html = make_listing_html([make_card_html(product_id="1"), make_card_html(product_id="2")])
        records = extractor.extract_page(make_soup(html), PAGE_URL).records
        assert records[0].news_from_date == records[1].news_from_date
