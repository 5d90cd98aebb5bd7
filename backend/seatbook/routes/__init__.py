# backend/seatbook/routes/__init__.py
"""HTTP routes. Read-only seat status; booking writes go through the services."""
