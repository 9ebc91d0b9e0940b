"""Core Module

Client-side building blocks for the Eventline API, independent of any
declarative tool.

Module Structure:
    - eventline/    : HTTP client, models, pagination and per-resource services
    - raw_data.py   : Opaque JSON envelope with structural comparison
    - validators.py : Identifier (KSUID), import key and enum validation

Usage Pattern:
    Import explicitly when needed:
        from eventline_provider.core.eventline import EventlineClient
        from eventline_provider.core.validators import parse_id
        from eventline_provider.core.raw_data import RawData, json_equal
"""
