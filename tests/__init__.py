"""
tests

Test suite for the tlm2api project.

Subpackages:
    - tlm_daemon: Tests for the FastAPI daemon (state, line source, routers)
    - integration: End-to-end tests against the assembled application

Decoder and shared model tests live at the top level.
"""
