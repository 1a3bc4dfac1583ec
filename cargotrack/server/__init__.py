"""CargoTrack HTTP API."""
