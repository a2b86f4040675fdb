"""
Activity Insights — Editor Telemetry Agent
==========================================
Editors pipe a JSON batch of activity events to this script. It works out
the programming language of each touched file and forwards the batch to
the Activity Insights service, once this machine has registered.

It sends ONLY: event type, timestamp, language name, and editor name.
File paths and file contents never leave the machine.

Usage:
    python agent.py              < events.json
    python agent.py register
    python agent.py dashboard
"""

from insights_core.runner import run


if __name__ == "__main__":
    run()
