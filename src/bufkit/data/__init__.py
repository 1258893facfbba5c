"""
Packaged reference data and the tools used to validate it.
"""

from ._validation import ParameterTableValidator, get_schema, list_schemas

__all__ = ["ParameterTableValidator", "get_schema", "list_schemas"]
