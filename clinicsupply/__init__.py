"""Clinic supply ordering service."""
