"""Core domain package for the uptime analyzer.

Core contains windowing, scanning, decoding, and identity deduplication
logic without any S3 or storage-specific code, keeping the audit rules
portable.
"""
