"""
Test suite for product cleanup.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_tag_service.py -v
"""
