"""Task services."""
