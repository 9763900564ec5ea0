"""BAM alignment records, raw tag data, index file selection, header merging and multi-source reading."""

__version__ = "0.9.0"
__all__ = ["alignment", "headers", "index", "multireader", "tagedit", "tags"]