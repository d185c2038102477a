"""
Pharmacy Tools

Medication text parsing, OMEQ calculation, product search and interaction
lookup for pharmacy support work.

Usage:
    from pharmacy_tools import Toolkit

    toolkit = Toolkit.from_config("configs/default.yaml")
    result = toolkit.calculate("Tramagetic OD 200 mg", "2")
    print(result.omeq, result.reason.value)
"""

from pharmacy_tools.toolkit.config import ToolkitConfig
from pharmacy_tools.toolkit.toolkit import Toolkit

__version__ = "0.1.0"

__all__ = [
    "Toolkit",
    "ToolkitConfig",
    "__version__",
]
