"""Decode Météo-France SYNOP CSV files and load them into a time-series store."""

__version__ = "0.1.0"
