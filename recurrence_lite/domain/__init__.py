"""Caller-side orchestration built on top of the expansion stages."""
