"""Infrastructure adapters. Import backends from their subpackages."""
