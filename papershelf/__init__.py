"""papershelf: fetch academic paper metadata and keep a local searchable library."""

__version__ = "0.1.0"
