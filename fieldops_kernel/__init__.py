"""
Field Operations Kernel

A client-resident bookkeeping core for field-service equipment:
- Inventory item state machine with an append-only status log
- Assignment and maintenance records per item
- Flat, whole-collection persistence behind a store adapter
- Injectable clock, identity and randomness for deterministic replay
"""

__version__ = "0.1.0"
