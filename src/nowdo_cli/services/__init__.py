"""Services module for NowDo CLI - business logic layer."""
