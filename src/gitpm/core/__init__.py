"""Core task tracking logic for gitpm."""
