"""Signing state machine, data model and errors."""
