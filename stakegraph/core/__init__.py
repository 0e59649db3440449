"""
Core domain models, share arithmetic, and envelope contracts.

This module contains the foundational building blocks that are independent
of how records were fetched or how results are delivered.
"""
