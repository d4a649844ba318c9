"""
Built-in rule sets for registration and checkpoint input.
"""

from typing import Any

from nexuschain.core.models import ProductCategory, ProductStatus

from .rule_config import RuleConfigBuilder


def registration_rules() -> list[dict[str, Any]]:
    """Rules a product registration must pass before anything is written."""
    return (
        RuleConfigBuilder()
        .add_min_length("name", 3, "Product name must be at least 3 characters")
        .add_min_length("product_key", 3, "Product ID must be at least 3 characters")
        .add_choice("category", ProductCategory, "Please select a category")
        .add_min_length("description", 10, "Description must be at least 10 characters")
        .add_required_field("manufacturing_date", "Manufacturing date is required")
        .add_date_after("expiry_date", "manufacturing_date", "Expiry date must be after manufacturing date")
        .add_min_length("origin_location", 3, "Origin location is required")
        .add_range("min_temperature", -273.15, None, "Temperature must be numeric and above absolute zero")
        .add_range("max_temperature", -273.15, None, "Temperature must be numeric and above absolute zero")
        .add_less_than("min_temperature", "max_temperature", "Min temperature must be less than max temperature")
        .build()
    )


def checkpoint_rules() -> list[dict[str, Any]]:
    """Rules a checkpoint must pass before it is recorded."""
    return (
        RuleConfigBuilder()
        .add_required_field("product_record_id", "Product is required")
        .add_min_length("location", 3, "Location must be at least 3 characters")
        .add_choice("status", ProductStatus, "Please select a status")
        .add_paired("latitude", "longitude", "Latitude and longitude must be given together")
        .add_range("latitude", -90.0, 90.0, "Latitude must be between -90 and 90")
        .add_range("longitude", -180.0, 180.0, "Longitude must be between -180 and 180")
        .add_range("temperature", -273.15, None, "Temperature must be numeric and above absolute zero")
        .build()
    )
