#!/usr/bin/env python3
"""
Interaction Lookup Example

Builds an interaction index from a FEST interaction register export and
checks a list of substances against it.

Usage:
    python examples/interaction_lookup.py interactions.json tramadol N06AB
"""

import sys

from pharmacy_tools.interactions import (
    build_interactions_index,
    format_interaction_summary,
    relevance_kind,
)
from pharmacy_tools.toolkit.datasets import load_json_rows


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)

    index = build_interactions_index(load_json_rows(sys.argv[1]))
    matches = index.match(sys.argv[2:])

    for match in matches:
        record = index.interactions[match.interaction_index]
        print(f"[{relevance_kind(record.relevance_text).value}] {record.interaction_id}")
        print(format_interaction_summary(record))
        print()

    print(f"--- {len(matches)} interaction(s) ---")


if __name__ == "__main__":
    main()
