# CareMatch - Routers Package
from app.routers import health, matching

__all__ = ["health", "matching"]
