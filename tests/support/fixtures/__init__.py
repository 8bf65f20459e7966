"""
Test Fixtures Package

Pytest plugins bridging the suite's fixture graph into pytest:
- browser.py: per-test fixture scope over the suite graph, app reachability check

Usage:
    Registered from the root conftest via ``pytest_plugins``.

Pattern:
    1. The graph decides what to build and in which order
    2. Pytest only hosts the per-test scope
    3. Teardown failures surface as pytest "error at teardown"
"""
