"""Fuzz testing suite for malreader."""

from .fuzz import FuzzCase, Fuzzer, FuzzFailure, run_fuzzer, run_suite

__all__ = ["FuzzCase", "Fuzzer", "FuzzFailure", "run_fuzzer", "run_suite"]
