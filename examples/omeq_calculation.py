#!/usr/bin/env python3
"""
OMEQ Calculation Example

Calculates oral morphine equivalents for a short medication list using the
product catalog bundled with the package.

Usage:
    python examples/omeq_calculation.py
"""

from pharmacy_tools import Toolkit
from pharmacy_tools.omeq import OMEQRow


def main():
    toolkit = Toolkit()

    rows = [
        OMEQRow("Tramagetic OD 200 mg", "2"),
        OMEQRow("Durogesic 25 µg/time"),
        OMEQRow("Paralgin forte 400 mg/30 mg", "6"),
    ]

    for row in rows:
        result = toolkit.calculate_row(row)
        value = "-" if result.omeq is None else f"{result.omeq:g}"
        print(f"{row.medication_text:35} {value:>8}  {result.reason.value}")

    print(f"\nTotal OMEQ: {toolkit.total_omeq(rows):g} mg")


if __name__ == "__main__":
    main()
