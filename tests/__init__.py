"""
Cross-cutting test suite for the Farm Assistant backend.

Test Organization:
- test_api_client.py - ApiClient transport and resource wrappers (mocked session)
- test_views.py - contact form and inbox view-models (mocked API)
- test_client_end_to_end.py - the real client driven against the app in-process
- test_exceptions.py - project API exception handler
- App-specific tests remain in their respective app directories (e.g., accounts/tests.py)
"""
