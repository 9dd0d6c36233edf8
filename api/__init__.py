"""HTTP transport for the interview orchestrator."""
