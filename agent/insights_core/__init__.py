"""
insights_core — Activity Insights editor telemetry agent
========================================================
One short-lived process per editor flush. No daemon, no GUI.

  constants.py    → Version, deadline, endpoints, file names, exit codes
  errors.py       → AgentError hierarchy (each carries its exit code)
  config.py       → Install dir, paths, logging setup, log truncation
  credentials.py  → CredentialStore (credentials.yaml, api_token field)
  file_lock.py    → CredentialsLock (non-blocking advisory file lock)
  enrollment.py   → acquire_token() + register command flow
  classifier.py   → LanguageClassifier (per-run cache over Pygments)
  pulses.py       → IncomingEvent / Pulse, date formatting, build_pulses
  ingestion.py    → Time-boxed stdin read, batch parsing, ingest()
  http_client.py  → HTTP session with pooling + CA bundle, no retries
  api.py          → deliver() pulses, check_for_updates()
  runner.py       → main() + command dispatch, the only exit point
"""
