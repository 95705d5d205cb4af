"""Service layer over the scheduling engine."""
