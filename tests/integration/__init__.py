# tests/integration/__init__.py
"""
Integration tests for the motor simulator.

Each test builds a SimulatorManager from YAML written to a temporary
config directory and runs the real driver loop against the real store,
watching the motor through a broadcast subscription.

Run with:
    pytest tests/integration/ -m integration
"""
