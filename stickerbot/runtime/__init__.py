"""Runtime helpers for process bootstrap."""
