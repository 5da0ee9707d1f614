"""
Text Compare Tests Package
==========================
Test suite for the comparison engine.

Run all tests: python3 -m pytest tests/engine/ -v
Run specific: python3 -m pytest tests/engine/test_differ.py -v
"""
