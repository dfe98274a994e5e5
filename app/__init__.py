"""CareBridge telehealth API."""
