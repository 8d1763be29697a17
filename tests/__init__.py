"""
proxysvar Test Suite

Tests for residual alignment, covariance partitioning, the two-stage relative
response estimator, shock scale recovery and the identification entry points.
Shared fixtures live in ``tests.conftest``.
"""
