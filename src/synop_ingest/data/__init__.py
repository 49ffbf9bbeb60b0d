"""Table parsing, field decoding and record mapping for SYNOP CSV files."""
