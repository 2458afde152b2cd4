"""Vendor API integrations."""
