"""Discord-facing feature modules - slash commands and interaction handlers."""
