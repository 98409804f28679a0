"""Store proximity and delivery-area search service."""
