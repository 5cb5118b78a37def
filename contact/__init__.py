"""
Contact Management App

Handles contact form submissions from the public site:
- Public contact form submission with rate limiting
- Admin list with status/category/search filtering
- Replies with history, emailed through the notifier
- Ignore / unignore and deletion
"""
