"""
Product data models.

Pure data classes for representing catalog product records.
No business logic - only data structure definitions.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional

# Integer columns; every other column is stored as text
INTEGER_FIELDS = frozenset({
    'product_online', 'qty', 'max_cart_qty', 'out_of_stock_qty',
    'allow_backorders', 'is_in_stock', 'manage_stock',
})

UNTITLED_PRODUCT = "Untitled Product"


@dataclass
class ProductRecord:
    """
    Product record as extracted from a catalog page and persisted in the store.

    Field order matches the export column order.

    Field Groups:
    - Identity: sku and url_key are unique across the store; (sku, store) too
    - Catalog placement: store, attribute set, type, websites, categories
    - Content: name, descriptions, style/material attributes, dimensions
    - Pricing: price, cost, special_price (all text)
    - Visibility/tax: visibility, tax class, "new" window
    - Media: base/small/swatch/thumbnail image, comma-joined additional images
    - Inventory: integer qty and stock flags
    - Vendor: vendor score, supplier, brand
    """

    # Identity
    sku: str = ""
    barcode: str = ""

    # Catalog placement
    store: str = "default"
    view_code: str = ""
    attribute_set_code: str = "default"
    product_type: str = "simple"
    product_websites: str = "base"
    link_url: str = ""

    # Content
    name: str = ""
    meta_title: str = ""
    url_key: str = ""
    description: str = ""
    short_description: str = ""
    categories1: str = ""
    categories2: str = ""
    categories3: str = ""
    categories: str = ""          # Flattened "Level/Level" path
    raw_materials_n: str = ""
    style: str = ""
    color: str = ""
    ts_dimensions_height: str = ""
    ts_dimensions_width: str = ""
    ts_dimensions_length: str = ""
    weight: str = ""
    manufacturer: str = ""

    # Pricing
    cost: str = ""
    price: str = ""
    special_price: str = ""

    # Visibility / tax
    visibility: str = "catalog,search"
    tax_class_name: str = "Taxable Goods"
    news_from_date: str = ""
    news_to_date: str = ""

    # Media
    base_image: str = ""
    small_image: str = ""
    swatch_image: str = ""
    thumbnail_image: str = ""
    additional_images: str = ""   # Comma-joined URLs

    # Inventory
    product_online: int = 1
    qty: int = 0
    max_cart_qty: Optional[int] = None
    out_of_stock_qty: int = 0
    allow_backorders: int = 0
    is_in_stock: int = 0
    manage_stock: int = 1

    # Vendor
    vendor_score: str = ""
    supplier: str = ""
    mgs_brand: str = ""

    def to_row(self) -> Dict[str, Any]:
        """Return the persisted column mapping."""
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ProductRecord":
        """Build a record from a stored row, ignoring store-managed columns."""
        known = {name: row[name] for name in PRODUCT_FIELDNAMES if name in row}
        return cls(**known)


PRODUCT_FIELDNAMES: List[str] = [f.name for f in fields(ProductRecord)]
