"""Deploy queue core shared by the bot and its tests."""
