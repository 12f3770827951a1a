"""Venue (CLOB) REST client, credential cache and forwarding."""
