"""
Centralized Audit Logging System

Tracks who did what, when, and on which financial resource of an account.
"""
