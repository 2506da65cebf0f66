"""API subpackage - thin FastAPI surface over the pricing engine."""
