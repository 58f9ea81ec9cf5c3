"""Tests for the tlm_daemon package."""
