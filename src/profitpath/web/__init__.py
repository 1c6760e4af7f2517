"""Web layer: request contracts, services and HTTP controllers."""
