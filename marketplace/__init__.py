"""GoMarketplace cart state: in-memory cart with key-value persistence."""
