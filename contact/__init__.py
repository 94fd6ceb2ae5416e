"""
Contact Management App

Handles the public contact form and the admin inbox:
- Public contact form submission
- Admin listing, status triage (new/read/replied/resolved) and deletion
- Email notification to support staff for new inquiries
"""
