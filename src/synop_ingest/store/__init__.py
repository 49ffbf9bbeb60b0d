"""Time-series point construction and batched writes."""
