"""Tests for docmerge configuration loading."""
