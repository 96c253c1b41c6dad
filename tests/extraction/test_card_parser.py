"""Tests for catalog_crawler/extraction/card_parser.py"""

from catalog_crawler.extraction.card_parser import (
    CardSelectors,
    parse_cards,
    parse_pagination,
)


class TestParseCards:
    def test_reads_raw_values(self, make_soup, make_listing_html, make_card_html):
        soup = make_soup(make_listing_html([make_card_html()]))
        cards = parse_cards(soup)

        assert len(cards) == 1
        card = cards[0]
        assert card.title.strip() == "Chair"
        assert card.color_dimensions == "أسود | 60 x 90 سم"
        assert card.price == "120.00 ر.س"
        assert card.stock == "متوفر"
        assert card.image_url == "https://cdn.example.com/img/123.png"
        assert card.link_url == "/sa/ar/products/123"

    def test_absolutizes_link_with_page_url(self, make_soup, make_listing_html, make_card_html):
        soup = make_soup(make_listing_html([make_card_html(product_id="55")]))
        cards = parse_cards(soup, page_url="https://shop.example.com/sa/ar/category/mirrors?page=2")
        assert cards[0].link_url == "https://shop.example.com/sa/ar/products/55"

    def test_keeps_page_order(self, make_soup, make_listing_html, make_card_html):
        html = make_listing_html([
            make_card_html(product_id="1", title="First"),
            make_card_html(product_id="2", title="Second"),
            make_card_html(product_id="3", title="Third"),
        ])
        titles = [card.title.strip() for card in parse_cards(make_soup(html))]
        assert titles == ["First", "Second", "Third"]

    def test_missing_elements_give_empty_strings(self, make_soup):
        soup = make_soup('<div class="impression"><span>nothing here</span></div>')
        card = parse_cards(soup)[0]
        assert card.title == ""
        assert card.price == ""
        assert card.stock == ""
        assert card.image_url == ""
        assert card.link_url == ""

    def test_no_cards(self, make_soup, make_listing_html):
        assert parse_cards(make_soup(make_listing_html([]))) == []


class TestParsePagination:
    def test_labels_and_active(self, make_soup, make_listing_html):
        soup = make_soup(make_listing_html([], page_labels=["١", "٢", "٣"], active="٢"))
        info = parse_pagination(soup)
        assert info.page_labels == ["١", "٢", "٣"]
        assert info.active_label == "٢"

    def test_blank_labels_dropped(self, make_soup, make_listing_html):
        soup = make_soup(make_listing_html([], page_labels=["1", " ", "2"], active="1"))
        assert parse_pagination(soup).page_labels == ["1", "2"]

    def test_no_pagination(self, make_soup, make_listing_html):
        info = parse_pagination(make_soup(make_listing_html([])))
        assert info.page_labels == []
        assert info.active_label is None


class TestCardSelectors:
    def test_from_config_overrides_and_ignores_unknown(self):
        selectors = CardSelectors.from_config({"product_card": ".card", "unknown": "x"})
        assert selectors.product_card == ".card"
        assert selectors.price == ".price span"

    def test_from_config_none(self):
        assert CardSelectors.from_config(None) == CardSelectors()
