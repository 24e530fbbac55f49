"""HTTP API for the newsdesk ledger."""
