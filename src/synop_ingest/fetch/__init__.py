"""Remote retrieval and local caching of SYNOP files."""
