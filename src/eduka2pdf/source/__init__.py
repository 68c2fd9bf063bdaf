"""Eduka platform adapter: session, metadata requests and payload parsing."""
