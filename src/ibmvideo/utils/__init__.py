"""Pure helpers for embed URLs and stored video data."""
