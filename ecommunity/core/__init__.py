"""Core types and constants shared by the ecommunity blueprints."""
