"""refsync core — discovery, ref naming, reconciliation and orchestration."""
