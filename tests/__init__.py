"""Tests for Friemon."""
