"""Make-live pipeline: export parsing, reconciliation and persistence per store."""
