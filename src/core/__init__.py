"""Core domain package for bankalerts.

Core contains rule resolution, notification building, dispatch and
categorization scheduling without any Telegram or storage-specific code,
keeping the business logic portable.
"""
