"""
Book Viewer - Live order book viewer and load generator for an order-matching service.

Architecture:
- datafeed/: Shared HTTP connection, strict JSON decoding, snapshot polling
- engine/: Pure view-model derivations (spread, mid, top-of-book windows)
- loadgen/: Synthetic order flow
- ui/: Order book ladder + order ticket (Textual TUI)
"""

__version__ = "0.1.0"
