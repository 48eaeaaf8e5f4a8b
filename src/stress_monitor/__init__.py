"""Biometric acquisition and stress scoring engine."""
