"""FormBridge - Pydantic schemas for stored records and API payloads."""
