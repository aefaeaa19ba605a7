"""
FinFlow Test Suite

This package contains tests for the FinFlow application:

- test_auth.py: Registration, verification, login, logout and password reset
- test_dashboard.py: Dashboard view, financial-year filtering and failure handling
- test_aggregation.py: Summary, bank distribution and party totals
- test_transactions.py: Cheque, cash and digital management screens
- test_reports.py: Report building, PDF rendering and report routes
- test_search.py: Party search across tables
- test_notifications.py: Change notification queues and routes
- test_settings.py: Profile and theme settings
- test_models.py / test_validators.py: Records and form validation
- test_helpers.py: Template filters, logging, e-mail and schema loading
- test_security.py: Security-focused tests (CSRF, headers, sessions)

Run all tests:
    pytest tests/

Run specific test file:
    pytest tests/test_reports.py

Run with verbose output:
    pytest tests/ -v
"""
