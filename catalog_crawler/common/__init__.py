# Common utilities
from .config_loader import (
    load_catalog_defaults,
    load_config,
    load_crawler_config,
)
from .csv_utils import configure_csv, read_csv, write_csv
from .log_config import setup_logging
from .numerals import convert_arabic_numerals, parse_int
from .text_utils import clean_price, slugify
