"""Integration tests for Azure resource reconciliation.

These tests run the reconciliation engine against the real file-backed
store in a temporary directory, and drive the CLI end to end from a saved
provider snapshot. No Azure access is required.
"""
