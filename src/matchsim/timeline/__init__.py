"""Timeline synthesis and the ordered event store."""
