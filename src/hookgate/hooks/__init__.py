"""Hook execution: circuit breaker, executors, registry, and event orchestration."""
