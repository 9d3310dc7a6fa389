"""Replication harness and scenario definitions for the qnet model."""
