"""Route sets: derivation, validation and registration with the routing tier."""
