"""Helpers: language negotiation, search conditions, SQL logging and small utilities."""