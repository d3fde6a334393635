"""Pydantic schemas — stored records and API payloads."""
