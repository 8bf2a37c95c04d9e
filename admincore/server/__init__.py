"""Runnable manager and small HTTP listeners."""