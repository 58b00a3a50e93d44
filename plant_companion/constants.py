"""
Shared constants used across the application.

This module contains constants that need to be consistent across
different parts of the application (models, validation, storage, API).
"""

# Care categories a schedule can belong to (stored value, display name)
CARE_CATEGORY_CHOICES = [
    ('watering', 'Watering'),
    ('fertilization', 'Fertilization'),
    ('pruning', 'Pruning'),
    ('repotting', 'Repotting'),
]

CARE_CATEGORIES = {choice[0] for choice in CARE_CATEGORY_CHOICES}
CARE_CATEGORY_NAMES = dict(CARE_CATEGORY_CHOICES)

# Key-value storage keys
PLANTS_STORAGE_KEY = 'plants_v1'
PHOTOS_STORAGE_KEY = 'plant_photos'
NOTIFICATION_PREFERENCES_KEY = 'notificationPreferences'

# Bounds for a schedule's frequency in days
MIN_FREQUENCY_DAYS = 1
MAX_FREQUENCY_DAYS = 365

# Default look-ahead for the "upcoming" task view
DEFAULT_UPCOMING_DAYS = 7
