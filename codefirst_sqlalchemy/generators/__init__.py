"""
Generators - scaffold model and migration source files.
"""

from .attributes import AttributeDefinition, normalize_type, parse_attribute, parse_attributes
from .model import GeneratedFile, ModelGenerator

__all__ = [
    "AttributeDefinition",
    "GeneratedFile",
    "ModelGenerator",
    "normalize_type",
    "parse_attribute",
    "parse_attributes",
]
