"""Holidays Act leave: payment rates, entitlements, validation and workflow."""
