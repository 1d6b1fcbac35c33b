"""Event and category service layer: data model, JSON logging, storage and request handlers."""

__version__ = "0.1.0"
__all__ = ["types", "logger", "store", "messages", "mappers", "server"]