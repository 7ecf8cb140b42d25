"""Clothing storefront back end: catalog, verified registration, inventory ledger."""

__version__ = "0.1.0"
