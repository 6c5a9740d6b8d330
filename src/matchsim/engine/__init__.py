"""Event dispatcher, odds model, notifications."""
