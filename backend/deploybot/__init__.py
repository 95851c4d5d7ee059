"""Discord bot that hands out turns on the shared deploy environment."""
