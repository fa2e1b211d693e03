"""Record store backend for the IMS inventory and sales client."""
