"""Configuration, domain errors, enums and time primitives."""
