"""Business logic services.

Service-layer functions implement all kiosk domain rules. Routes call
them and never touch the database directly.
"""
