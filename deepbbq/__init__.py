"""Data preparation tools for the deep-bbq backbone model."""
