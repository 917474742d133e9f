#!/usr/bin/env python3
"""Reconnect and backlog replay example for Channel Sync.

This example demonstrates:
1. Recording a live feed and suppressing duplicates
2. Switching channels to catch-up mode after a reconnect
3. Replaying an out-of-order backlog without losing or repeating events
4. Building resume cursors for the subscription request
5. Flushing state before suspend and reloading it on the next start

Run this example:
    python reconnect_replay.py
"""

import tempfile
from pathlib import Path

from channel_sync import SyncStore, SyncStoreConfig, BackendKind


def deliver(store, channel, seq, label):
    accepted = store.record_event(channel, f"evt-{seq}", 1_700_000_000_000 + seq, seq)
    print(f"    {label} seq={seq:<3} -> {'forward' if accepted else 'drop'}")


def main():
    with tempfile.TemporaryDirectory() as temp_dir:
        state_dir = Path(temp_dir) / "sync_state"
        config = SyncStoreConfig(
            backend=BackendKind.FILE,
            store_path=state_dir,
            debounce_seconds=0.5,
        )

        print("=" * 60)
        print("Channel Sync - Reconnect Replay Example")
        print("=" * 60)

        channel = "north_intrusion"
        store = SyncStore(config)

        # ---------------------------------------------------------------------
        # Step 1: Live feed
        # ---------------------------------------------------------------------
        print("\n[1] Live feed (in order, one network retry)...")
        for seq in [1, 2, 3, 3, 4]:
            deliver(store, channel, seq, "live")

        # ---------------------------------------------------------------------
        # Step 2: Reconnect, ask the server to resume
        # ---------------------------------------------------------------------
        print("\n[2] Socket reconnected, building subscription request...")
        store.enable_catch_up(channel)
        print(f"    syncState: {store.resume_state([channel])}")

        # ---------------------------------------------------------------------
        # Step 3: Backlog replay, out of order with repeats
        # ---------------------------------------------------------------------
        print("\n[3] Replaying backlog in catch-up mode...")
        for seq in [6, 3, 5, 6, 7, 5]:
            deliver(store, channel, seq, "replay")
        print(f"    Catch-up progress: {store.progress(channel)} sequences")

        # ---------------------------------------------------------------------
        # Step 4: Back to live
        # ---------------------------------------------------------------------
        print("\n[4] Replay reached the live edge...")
        store.disable_catch_up(channel)
        for seq in [6, 8]:
            deliver(store, channel, seq, "live")

        # ---------------------------------------------------------------------
        # Step 5: Suspend and restart
        # ---------------------------------------------------------------------
        print("\n[5] Suspending: force flush...")
        result = store.force_flush()
        print(f"    Wrote {result.channels_written} channels, {result.bytes_written} bytes")
        store.close()

        restarted = SyncStore(config)
        record = restarted.get_record(channel)
        print("\n[6] Restarted:")
        print(f"    highest_sequence = {record.highest_sequence}")
        print(f"    total_received   = {record.total_received}")
        print(f"    catch-up mode    = {restarted.is_catch_up(channel)}")
        restarted.close()

        print("\n" + "=" * 60)
        print("Example complete!")
        print("=" * 60)


if __name__ == "__main__":
    main()
