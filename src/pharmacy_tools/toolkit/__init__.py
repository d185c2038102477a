"""
Toolkit Module

Configuration, dataset loading and the Toolkit facade.
"""

from pharmacy_tools.toolkit.config import ToolkitConfig, load_config
from pharmacy_tools.toolkit.toolkit import Toolkit

__all__ = [
    "Toolkit",
    "ToolkitConfig",
    "load_config",
]
