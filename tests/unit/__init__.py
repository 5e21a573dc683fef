"""Unit tests for individual components in isolation.

Coverage:
    - chat/transcript: Ordering, snapshots and observers
    - chat/decoder: SSE line reassembly and fragment extraction
    - chat/cancellation: Racing awaitables against the token
    - chat/config and models: Validation and wire format
"""
