"""
tests.integration

Integration tests that exercise the assembled tlm2api application through its
HTTP and WebSocket interfaces.
"""
