"""Hive Mind: an idle hive simulation with offline progress and save slots."""
