"""Durable key-value storage and the stress history log."""
