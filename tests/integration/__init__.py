"""Integration tests for components working together.

The completion server is replaced by httpx.MockTransport; everything from
the HTTP client down to the transcript runs for real.
"""
