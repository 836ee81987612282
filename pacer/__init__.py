"""Pacer: marathon training tracker service."""
