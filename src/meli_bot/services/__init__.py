"""Services module - Authorization flow, order resolution and buyer messaging."""
