"""
Parsing domain: recognised text -> health parameters.
"""

from .lab_value_parser import LabValueParser

__all__ = ["LabValueParser"]
