"""In-memory healthcare record contracts: access control, allergy management and allergy tracking."""

__version__ = "0.1.0"