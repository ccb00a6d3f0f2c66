"""Credential issuance and access control."""
