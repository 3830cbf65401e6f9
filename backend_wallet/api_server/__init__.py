"""HTTP API for the wallet engine."""
