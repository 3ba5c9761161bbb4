"""Devices and the relationships that share them with users."""
