"""docschema - schema-driven document validation for deployed content schemas."""

__version__ = "0.1.0"
