# scripts/smoke.py
"""
Smoke Test Script for the CodeTracker snapshot engine.

Scans a directory, diffs it against the cached snapshot (if the project has
one), and prints what the next trigger would report. Nothing is submitted and
nothing is written.

Usage
-----
1. Scan the current directory with the default configuration:
    $ uv run python scripts/smoke.py

2. Scan another project, using its `.codetracker/config.json` when present:
    $ uv run python scripts/smoke.py --root ../my-project
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

from codetracker.core.contracts.config import TrackerConfig
from codetracker.core.state.storage import JsonStateStore
from codetracker.core.workspace import Workspace
from codetracker.engine import diff_inventories, scan_tree, summarize

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)


def main() -> None:
    """Execute the smoke scan."""
    parser = argparse.ArgumentParser(description="Run CodeTracker Smoke Scan")
    parser.add_argument("--root", "-r", type=str, default=".", help="Project root to scan")
    parser.add_argument("--limit", "-n", type=int, default=20, help="Rows to print")
    args = parser.parse_args()

    ws = Workspace.locate(args.root)
    config_result = ws.load_config()
    if config_result.is_ok():
        print(f"\n⚙️  Using {ws.config_path}")
    else:
        print("\n⚙️  No config.json found, using defaults")
    config = config_result.unwrap(TrackerConfig())

    # 1. Scan
    started = time.perf_counter()
    scanned = scan_tree(ws.root, config, reserved=[ws.state_dir])
    elapsed = time.perf_counter() - started
    if scanned.is_err():
        print(f"\n❌ Scan failed: {scanned.unwrap_err()}")
        return
    inventory = scanned.unwrap()
    total_bytes = sum(f.size for f in inventory.values())
    print(f"📂 {ws.root}: {len(inventory)} files, {total_bytes} bytes in {elapsed:.3f}s")

    # 2. Diff
    snapshot = JsonStateStore(ws.cache_dir).load_snapshot()
    if snapshot is None:
        print("🆕 No cached snapshot: everything counts as added")
    else:
        print(f"🧾 Cached snapshot #{snapshot.snapshot_id} from {snapshot.created_at}")
    changes = diff_inventories(inventory, snapshot.files if snapshot is not None else None)

    # 3. Report
    counts = summarize(changes)
    print("\n" + "=" * 60)
    print(f"+{counts['added']} added  ~{counts['modified']} modified  -{counts['deleted']} deleted")
    print("=" * 60)
    for change in changes[: args.limit]:
        print(f"  {change.change_type:<9} {change.path}")
    if len(changes) > args.limit:
        print(f"  ... and {len(changes) - args.limit} more")


if __name__ == "__main__":
    main()
