"""
Test suite for Smart Paste.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_smart_paste_service.py -v
"""
