"""Test configuration and fixtures."""
