"""Event discovery engine: filtering, sorting, bucketing and search history."""
