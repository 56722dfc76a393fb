"""WhatsApp bot that tracks daily spending against a per-user limit."""
