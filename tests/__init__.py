"""Tests for docmerge."""
