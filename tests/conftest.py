"""Pytest configuration: teach mockfirestore the Firestore features the app uses."""

from tests.mock_utils import patch_mockfirestore

patch_mockfirestore()
