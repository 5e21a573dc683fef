"""Test package for Stream Chat.

Structure:
    - unit/: Transcript, decoder, cancellation, config and schema tests
    - integration/: Controller turns over a mock HTTP transport, host app

Uses pytest with pytest-asyncio (auto mode) and pytest-check for soft assertions.
"""
