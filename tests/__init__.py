"""
Test suite for corrnet

Contains:
- tests/unit/          : Unit tests for individual modules
"""
