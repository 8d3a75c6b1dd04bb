"""Player registration, infection and movement."""
