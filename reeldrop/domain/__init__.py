"""Domain layer: extraction rules, storage entities, ledger and retention."""
