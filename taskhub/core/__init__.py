"""Core modules for Task Hub."""
