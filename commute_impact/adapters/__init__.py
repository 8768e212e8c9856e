"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Vehicle reference data (CSV file, SQL table)
- Calculation storage (SQLAlchemy)
- Mapping services (Google Maps)
- Caching systems (in-memory, null)
"""
