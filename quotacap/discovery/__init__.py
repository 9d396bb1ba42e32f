"""Category discovery: external config parsing and settings generation."""

from quotacap.discovery.generator import CategoryConfigGenerator
from quotacap.discovery.parser import CategoryDiscoveryParser, extract_category_name

__all__ = ["CategoryConfigGenerator", "CategoryDiscoveryParser", "extract_category_name"]
