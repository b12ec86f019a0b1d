"""Test package for bin-route.

This package contains:
- Unit tests (test_routing.py, test_planner.py, test_config.py)
- Point-store tests (test_points_store.py)
- HTTP action tests (test_actions.py)
- Test configuration (conftest.py)
"""
