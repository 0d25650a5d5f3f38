"""Tests for aibot."""
