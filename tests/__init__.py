"""Test suite for the webmarkdown service."""
