"""Configuration loading and engine wiring."""
