"""Pydantic schemas for Task Hub."""
