"""
Test suite for stakegraph

Contains:
- tests/builders.py : Builders сырых записей backend-а графа
- tests/unit/       : Unit tests for individual modules and operations
"""
