"""Settlement reconciliation engine for shared group expenses."""
