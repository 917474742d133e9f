"""Example scripts for Channel Sync.

Available examples:

reconnect_replay.py
    Live feed, reconnect, out-of-order backlog replay, back to live,
    then flush and restart. Start here to understand the core workflow.

Run:
    python examples/reconnect_replay.py
"""
