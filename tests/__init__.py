"""Test package for cityroute.

This package contains:
- Graph and heap tests (test_graph.py, test_heap.py)
- Search engine tests (test_search.py, test_floyd.py)
- Routing service tests (test_routing_service.py)
- Assignment and dispatch tests (test_assignment.py)
- Configuration tests (test_config.py)
- Shared fixtures (conftest.py)
"""
