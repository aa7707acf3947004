"""Configure Django before pytest collects the SimpleTestCase modules."""

import os

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
django.setup()
