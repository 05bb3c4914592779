"""
Test configuration — sets required env vars before any imports.
"""

import os

# Dummy Supabase credentials so Settings() doesn't fail during test collection.
# No test talks to a real instance — the client is always mocked.
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("DASHBOARD_TIMEZONE", "UTC")
